"""Alembic environment for the visitors store.

Migrations run only through ``db.init_db()``, which hands over a live
connection via ``config.attributes["connection"]`` so the schema is brought
up to date inside the application's startup transaction.  No ``alembic.ini``
is shipped.
"""

from __future__ import annotations

from alembic import context
from visitor_badge.models import Base

config = context.config
target_metadata = Base.metadata


def run_migrations() -> None:
    connection = config.attributes.get("connection", None)
    if connection is None:
        raise RuntimeError(
            "Migrations need a live connection – run them via db.init_db()"
        )

    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


run_migrations()
