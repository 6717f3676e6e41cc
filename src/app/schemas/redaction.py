"""Response base that drops monetary fields for callers who may not see pricing."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, SerializerFunctionWrapHandler, model_serializer


class RedactableRead(BaseModel):
    """Serializes without ``redacted_fields`` when ``pricing_redacted`` is set.

    The fields are removed from the output entirely, not nulled.
    """

    model_config = ConfigDict(from_attributes=True)

    redacted_fields: ClassVar[tuple[str, ...]] = ()

    pricing_redacted: bool = False

    @model_serializer(mode="wrap")
    def _drop_redacted(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if self.pricing_redacted:
            for name in self.redacted_fields:
                data.pop(name, None)
        return data

    @classmethod
    def for_viewer(cls, obj: Any, can_view_pricing: bool) -> "RedactableRead":
        view = cls.model_validate(obj)
        if can_view_pricing:
            return view
        return view.model_copy(
            update={name: None for name in cls.redacted_fields} | {"pricing_redacted": True}
        )
