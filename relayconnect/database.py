from functools import cached_property
from typing import Dict, Mapping, Type

import databases
import sqlalchemy
from pydantic import BaseModel

from .settings import DATABASE_URL

_COLUMN_TYPES = {
    int: sqlalchemy.Integer,
    str: sqlalchemy.String,
    float: sqlalchemy.Float,
    bool: sqlalchemy.Boolean,
}


class Database:
    def __init__(self, url: databases.DatabaseURL = DATABASE_URL) -> None:
        self.url = url
        self._tables: Dict[str, sqlalchemy.Table] = {}

    def populate_tables(self, models: Mapping[str, Type[BaseModel]]) -> None:
        """
        One table per model, with an autoincrementing `id` and a column per model field.
        Fields are indexed since any of them may end up in an ordering key.
        """
        for table_name, model in models.items():
            if table_name in self._tables:
                continue
            columns = [
                sqlalchemy.Column(
                    field_name,
                    _COLUMN_TYPES[field.annotation],
                    nullable=False,
                    index=True,
                )
                for field_name, field in model.model_fields.items()
            ]
            self._tables[table_name] = sqlalchemy.Table(
                table_name,
                self.metadata,
                sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
                *columns,
            )

    @cached_property
    def database(self) -> databases.Database:
        return databases.Database(str(self.url))

    @cached_property
    def metadata(self) -> sqlalchemy.MetaData:
        return sqlalchemy.MetaData()

    def get_table_by_name(self, name: str) -> sqlalchemy.Table:
        return self._tables[name]

    def rebind(self, url: databases.DatabaseURL) -> None:
        """
        Point at another database. Only valid while disconnected.
        """
        if "database" in self.__dict__ and self.database.is_connected:
            raise RuntimeError("Cannot rebind a connected database")
        self.url = url
        self.__dict__.pop("database", None)

    def create_all(self) -> None:
        # TODO: should use alembic or something
        engine = sqlalchemy.create_engine(str(self.url))
        try:
            self.metadata.create_all(engine)
        finally:
            engine.dispose()

    async def connect(self) -> None:
        self.create_all()
        await self.database.connect()

    async def disconnect(self) -> None:
        await self.database.disconnect()


database = Database()
