from unittest.mock import MagicMock

from docgate.infrastructure.logging_services import StructlogLoggingService


def test_levels_map_to_structlog_methods():
    service = StructlogLoggingService()
    service._logger = MagicMock()

    service.log("a")
    service.info("b")
    service.warn("c")
    service.error("d")

    assert [c.args[0] for c in service._logger.info.call_args_list] == ["a", "b"]
    service._logger.warning.assert_called_once_with("c")
    service._logger.error.assert_called_once_with("d")
