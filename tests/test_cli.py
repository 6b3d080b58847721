import io
import json
import logging

import httpx
import pytest

from conftest import route_transport
from redir import cli
from redir.tracer import RedirectTracer


def refuse(request):
    raise httpx.ConnectError("connection refused", request=request)


ROUTES = {
    "http://ok.example/": (301, {"Location": "/home"}),
    "http://ok.example/home": (200, {}),
    "http://broken.example/": refuse,
    "http://other.example/page": (404, {}),
}


@pytest.fixture
def mock_network(monkeypatch):
    monkeypatch.setenv("REDIR_TRUST_ENV", "false")
    transport = route_transport(ROUTES)
    monkeypatch.setattr(cli, "RedirectTracer", lambda settings: RedirectTracer(settings, transport=transport))


def test_single_url_json(mock_network, capsys):
    code = cli.main(["--url", "http://ok.example/", "--output", "json"])
    out = capsys.readouterr().out

    assert code == 0
    hops = json.loads(out)
    assert [(hop["url"], hop["status_code"]) for hop in hops] == [
        ("http://ok.example/", 301),
        ("http://ok.example/home", 200),
    ]


def test_single_url_table(mock_network, capsys):
    code = cli.main(["--url", "http://ok.example/", "--no-color"])
    out = capsys.readouterr().out

    assert code == 0
    assert "http://ok.example/home" in out
    assert "Finished at" in out
    assert "\033[" not in out


def test_stdin_batch_continues_after_failure(mock_network, capsys):
    stdin = io.StringIO(
        "first http://ok.example/ here\n"
        "no url on this line\n"
        "http://broken.example/\n"
        "last one: http://other.example/page\n"
    )
    code = cli.main(["--output", "json", "--no-color"], stdin=stdin)
    captured = capsys.readouterr()

    assert code == 1
    assert "Error processing http://broken.example/: ConnectError: connection refused" in captured.err
    assert '"url": "http://ok.example/home"' in captured.out
    assert '"status_code": 404' in captured.out


def test_max_hops_flag(mock_network, capsys):
    code = cli.main(["--url", "http://ok.example/", "--output", "json", "--max", "1"])
    hops = json.loads(capsys.readouterr().out)

    assert code == 0
    assert [hop["status_code"] for hop in hops] == [301]


def test_unknown_output_format_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--url", "http://ok.example/", "--output", "xml"])
    assert exc_info.value.code == 2
    assert "invalid choice" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["0", "-3", "many"])
def test_max_must_be_positive_integer(value):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--url", "http://ok.example/", "--max", value])
    assert exc_info.value.code == 2


def test_defaults_follow_settings(monkeypatch):
    monkeypatch.setenv("REDIR_OUTPUT", "json")
    monkeypatch.setenv("REDIR_MAX_HOPS", "7")
    args = cli.build_parser().parse_args([])
    assert args.output == "json"
    assert args.max_hops == 7
    assert args.url == ""


def test_stderr_silent_on_success(mock_network, capsys):
    code = cli.main(["--url", "http://ok.example/", "--output", "json"])
    captured = capsys.readouterr()

    assert code == 0
    assert captured.err == ""
    assert not logging.getLogger("redir.tracer").isEnabledFor(logging.WARNING)


def test_stderr_only_error_line_on_failure(mock_network, capsys):
    code = cli.main(["--url", "http://broken.example/", "--no-color"])
    captured = capsys.readouterr()

    assert code == 1
    assert captured.err.splitlines() == [
        "Error processing http://broken.example/: ConnectError: connection refused"
    ]
    assert captured.out == ""


def test_verbose_enables_debug_logs(mock_network, capsys):
    cli.main(["--url", "http://ok.example/", "--output", "json", "--verbose"])
    assert logging.getLogger("redir.tracer").isEnabledFor(logging.DEBUG)
    cli.main(["--url", "http://ok.example/", "--output", "json"])
    assert not logging.getLogger("redir.tracer").isEnabledFor(logging.DEBUG)
