from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from placement.config import settings
from placement.database import init_db
from placement.services.accounts import AccountService
from placement.services.store import CollectionStore


log = logging.getLogger(__name__)


def seed_default_staff(store: CollectionStore) -> None:
    staff_id = settings.default_staff_id.strip()
    if not staff_id:
        return
    AccountService(store).ensure_staff(staff_id, settings.default_staff_password)


def run_bootstrap(store: CollectionStore, bind: Engine | None = None) -> None:
    init_db(bind)
    seed_default_staff(store)
    log.info("Bootstrap complete")
