"""Inputs to screen generation: the product brief and the feature document."""

from typing import Any

from pydantic import BaseModel, Field

from ..core.validate import MAX_FIELD_LENGTH, RequestValidator


class Brief(BaseModel):
    """Product brief the screens are designed for."""

    product_name: str = ""
    problem_statement: str = ""
    target_user: str = ""
    proposed_solution: str = ""
    product_objectives: str = ""
    detailed_functionality: str = ""

    @property
    def display_name(self) -> str:
        return self.product_name.strip() or "the application"

    def prompt_fields(self) -> list[tuple[str, str]]:
        """Labelled brief fields in prompt order."""
        return [
            ("Product Name", self.product_name),
            ("Problem Statement", self.problem_statement),
            ("Target User", self.target_user),
            ("Proposed Solution", self.proposed_solution),
            ("Product Objectives", self.product_objectives),
            ("Detailed Functionality", self.detailed_functionality),
        ]


class FeatureDocument(BaseModel):
    """Requirements document the screens belong to (the parent document).

    ``content`` is either free text or a structured JSON object.
    """

    id: str = Field(min_length=1)
    title: str = ""
    content: str | dict[str, Any] = ""


class GenerationRequest(RequestValidator):
    """Validated input of one generation call."""

    brief: Brief
    document: FeatureDocument
    feature_summary: str = Field(default="", max_length=MAX_FIELD_LENGTH)

    @property
    def parent_document_id(self) -> str:
        return self.document.id
