"""Export Handler."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..core import get_logger
from ..core.validate import ValidationError
from ..export import FeatureExporter
from ..models.export import BoardSummary, ExportFeature, ExportResult

logger = get_logger(__name__)


class ExportHandler:
    """Validates raw feature payloads and hands them to the exporter."""

    def __init__(self, exporter: FeatureExporter) -> None:
        self.exporter = exporter

    async def export(
        self,
        board_id: str,
        features: list[ExportFeature | dict[str, Any]],
        token: str,
        list_id: str | None = None,
    ) -> ExportResult:
        """
        Export features to ``board_id``.

        Raises:
            ValidationError: Missing board id or token, or a malformed feature
        """
        if not board_id or not token:
            raise ValidationError("Board id and token are required")

        try:
            parsed = [
                item if isinstance(item, ExportFeature) else ExportFeature.model_validate(item)
                for item in features
            ]
        except PydanticValidationError as e:
            logger.error("validation", error=str(e))
            raise ValidationError(f"Invalid feature: {e.errors()[0]['msg']}") from e

        return await self.exporter.export_features(board_id, parsed, token, list_id=list_id)

    async def boards(self, token: str) -> list[BoardSummary]:
        """Boards the token can export to."""
        return await self.exporter.client.list_boards(token)
