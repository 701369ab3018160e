from typing import Iterable, Type, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class ORMMapper:
    """ORM rows to JSON-ready dicts through a response schema."""

    @staticmethod
    def dump(item, schema: Type[T], **extra) -> dict:
        data = schema.model_validate(item).model_dump(mode="json")
        data.update(extra)
        return data

    @staticmethod
    def dump_many(items: Iterable, schema: Type[T]) -> list[dict]:
        return [schema.model_validate(item).model_dump(mode="json") for item in items]
