import pytest

from minios.errors import (
    BadPathError,
    DiskIOError,
    FilesystemNotUsError,
    InvalidArgumentError,
    InvalidFormatError,
    KernelError,
    OutOfMemoryError,
    ReadOnlyError,
    Status,
    TakenError,
    UnimplementedError,
    error_for,
)


@pytest.mark.parametrize(
    "status, cls",
    [
        (Status.EIO, DiskIOError),
        (Status.EINVARG, InvalidArgumentError),
        (Status.ENOMEM, OutOfMemoryError),
        (Status.EBADPATH, BadPathError),
        (Status.EFSNOTUS, FilesystemNotUsError),
        (Status.ERDONLY, ReadOnlyError),
        (Status.EUNIMP, UnimplementedError),
        (Status.EISTKN, TakenError),
        (Status.EINFORMAT, InvalidFormatError),
    ],
)
def test_error_for_maps_status(status, cls):
    err = error_for(status, "boom")
    assert type(err) is cls
    assert isinstance(err, KernelError)
    assert err.status == status
    assert str(err) == "boom"


def test_error_for_accepts_negative_codes():
    err = error_for(-Status.EINVARG)
    assert isinstance(err, InvalidArgumentError)
    assert err.code == -Status.EINVARG


def test_error_for_rejects_ok():
    with pytest.raises(ValueError):
        error_for(Status.ALL_OK)


def test_error_for_rejects_unknown():
    with pytest.raises(ValueError):
        error_for(99)


def test_status_values_from_source():
    eio = error_for(1)
    assert isinstance(eio, DiskIOError)
    assert eio.status == Status.EIO
    informat = error_for(-9)
    assert isinstance(informat, InvalidFormatError)
    assert informat.status == Status.EINFORMAT


def test_error_can_be_raised_and_caught_as_base():
    err = error_for(Status.ERDONLY, "read only")
    assert err.code == -6
    with pytest.raises(KernelError) as info:
        raise err
    assert info.value is err
    assert str(info.value) == "read only"