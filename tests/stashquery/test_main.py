import os
from unittest import mock

import pytest
from conftest import api_error, make_pages
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import NotFoundError

from stashquery import main as cli
from stashquery.core.exceptions import ClusterConnectionError

START = "2024-01-01T00:00:00.000Z"
END = "2024-01-01T23:59:59.999Z"


@pytest.fixture
def connect(monkeypatch):
    connect = mock.Mock()
    monkeypatch.setattr(cli, "get_elasticsearch_client", connect)
    return connect


class TestMain:
    """Exit codes and wiring of the command line entry point."""

    def test_successful_export(self, connect, fake_es, tmp_path, capsys):
        connect.return_value = fake_es(pages=make_pages([2, 1, 0]))
        output = tmp_path / "out.log"

        code = cli.main(["-s", START, "-e", END, "-q", "host:web01", "-o", str(output)])

        assert code == 0
        assert output.read_text() == "line 0001\nline 0002\nline 0003\n"
        stdout = capsys.readouterr().out
        assert "Found 3 results" in stdout
        assert f"Wrote 3 lines to {output}" in stdout

    def test_options_reach_config_and_request(self, connect, fake_es):
        es = fake_es(pages=make_pages([1, 0]))
        connect.return_value = es

        code = cli.main(
            [
                "-s", START,
                "-e", END,
                "-i", "syslog-", "nginx-",
                "--host", "es.internal",
                "--port", "9201",
                "--scroll-size", "50",
                "--scroll-time", "5m",
            ]
        )

        assert code == 0
        config = connect.call_args.args[0]
        assert config.host == "es.internal"
        assert config.port == 9201
        assert sorted(es.indices.checked) == ["nginx-2024.01.01", "syslog-2024.01.01"]
        assert es.search_calls[0]["size"] == 50
        assert es.search_calls[0]["scroll"] == "5m"

    @pytest.mark.parametrize(
        "argv",
        [
            ["-s", "2024-01-01", "-e", END],
            ["-s", START, "-e", "2024-01-01T23:59:59Z"],
            ["-s", START],
            ["--scroll-time", "soon"],
        ],
    )
    def test_invalid_arguments_fail_before_connecting(self, connect, argv):
        assert cli.main(argv) == 1
        connect.assert_not_called()

    def test_unreachable_cluster(self, connect):
        connect.side_effect = ClusterConnectionError("Could not connect")

        assert cli.main(["-s", START, "-e", END]) == 1

    def test_incomplete_export(self, connect, fake_es):
        expired = api_error(NotFoundError, 404, "search_context_missing_exception")
        connect.return_value = fake_es(pages=make_pages([1, 1, 0]), scroll_errors={1: expired})

        assert cli.main(["-s", START, "-e", END]) == 1

    def test_interrupted(self, connect, fake_es):
        connect.return_value = fake_es(
            pages=make_pages([1, 1, 0]), scroll_errors={1: KeyboardInterrupt()}
        )

        assert cli.main(["-s", START, "-e", END]) == 130

    def test_cluster_lost_before_search(self, connect, fake_es):
        connect.return_value = fake_es(exists_error=ESConnectionError("Connection error"))

        assert cli.main(["-s", START, "-e", END]) == 1

    def test_full_disk(self, connect, fake_es):
        if not os.path.exists("/dev/full"):
            pytest.skip("/dev/full not available")
        connect.return_value = fake_es(pages=make_pages([2, 0]))

        assert cli.main(["-s", START, "-e", END, "-o", "/dev/full", "--flush-size", "1"]) == 1
