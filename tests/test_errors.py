import pytest

from corekv.errors import (
    CoreKVError,
    KeyNotFoundError,
    NoRewriteError,
    RejectedError,
    StopIterationError,
    TxnTooBigError,
    cond_panic,
    log_err,
    wrap_err,
)


@pytest.mark.parametrize(
    "cls, message",
    [
        (KeyNotFoundError, "Key not found"),
        (StopIterationError, "Stop"),
        (TxnTooBigError, "Txn is too big to fit into one request"),
        (NoRewriteError, "Value log GC attempt didn't result in any cleanup"),
        (RejectedError, "Value log GC request rejected"),
    ],
)
def test_default_messages(cls, message):
    err = cls()
    assert str(err) == message
    assert isinstance(err, CoreKVError)


def test_custom_message_overrides_default():
    assert str(KeyNotFoundError("missing thing")) == "missing thing"


def test_cond_panic_raises_given_error():
    with pytest.raises(KeyNotFoundError):
        cond_panic(True, KeyNotFoundError())


def test_cond_panic_with_text_raises_base_error():
    with pytest.raises(CoreKVError, match="went wrong"):
        cond_panic(True, "went wrong")


def test_cond_panic_false_returns_quietly():
    assert cond_panic(False, KeyNotFoundError()) is None


def test_log_err_none_prints_nothing(capsys):
    assert log_err(None) is None
    assert capsys.readouterr().out == ""


def test_wrap_err_prints_message(capsys):
    err = RuntimeError("disk")
    assert wrap_err("while writing", err) is err
    out = capsys.readouterr().out
    assert out.startswith("while writing")
    assert "disk" in out


def test_wrap_err_none(capsys):
    assert wrap_err("ignored", None) is None
    assert capsys.readouterr().out == ""