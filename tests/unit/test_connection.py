from unittest.mock import patch

import pytest

from docscan.config.settings import Settings
from docscan.database import connection
from docscan.database.connection import build_conninfo, close_pool, get_connection, init_pool


class TestConnection:
    def test_build_conninfo(self) -> None:
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None, db_host="db", db_port=6543, db_database="scans", db_username="u", db_password="p"
        )
        assert build_conninfo(settings) == "host=db port=6543 dbname=scans user=u password=p"

    def test_init_pool_once_and_close(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        with patch("docscan.database.connection.ConnectionPool") as mock_pool:
            init_pool(settings)
            init_pool(settings)
            close_pool()

        mock_pool.assert_called_once()
        assert mock_pool.call_args.kwargs == {"min_size": 1, "max_size": 4}
        mock_pool.return_value.close.assert_called_once()
        assert connection._pool is None

    def test_get_connection_requires_pool(self) -> None:
        with pytest.raises(RuntimeError, match="not initialized"):
            with get_connection():
                pass
