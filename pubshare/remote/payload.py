from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class FileUpload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def _form_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FormPayload:
    """Ordered record fields for a create/update call.

    A field name may repeat (several ``preview_img`` files, for instance).
    Payloads carrying at least one ``FileUpload`` are sent as multipart, the
    rest as JSON.
    """

    def __init__(self) -> None:
        self._fields: list[tuple[str, object]] = []

    def append(self, name: str, value: object) -> None:
        self._fields.append((name, value))

    def get_all(self, name: str) -> list[object]:
        return [value for field, value in self._fields if field == name]

    def names(self) -> list[str]:
        seen: list[str] = []
        for field, _value in self._fields:
            if field not in seen:
                seen.append(field)
        return seen

    def __iter__(self) -> Iterator[tuple[str, object]]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    @property
    def has_files(self) -> bool:
        return any(isinstance(value, FileUpload) for _field, value in self._fields)

    def to_json(self) -> dict[str, object]:
        body: dict[str, object] = {}
        for name in self.names():
            values = self.get_all(name)
            body[name] = values[0] if len(values) == 1 else values
        return body

    def to_multipart(self) -> tuple[dict[str, list[str]], list[tuple[str, tuple[str, bytes, str]]]]:
        data: dict[str, list[str]] = {}
        files: list[tuple[str, tuple[str, bytes, str]]] = []
        for name, value in self._fields:
            if isinstance(value, FileUpload):
                files.append((name, (value.filename, value.content, value.content_type)))
            else:
                data.setdefault(name, []).append(_form_value(value))
        return data, files

    @classmethod
    def from_mapping(cls, values: dict[str, object]) -> FormPayload:
        payload = cls()
        for name, value in values.items():
            if isinstance(value, (list, tuple)):
                for item in value:
                    payload.append(name, item)
            else:
                payload.append(name, value)
        return payload
