from __future__ import annotations

from fastapi import Depends

from placement.database import get_store
from placement.services.accounts import AccountService
from placement.services.lifecycle import PlacementLifecycle
from placement.services.postings import PostingService
from placement.services.reports import ReportService
from placement.services.store import CollectionStore


def get_lifecycle(store: CollectionStore = Depends(get_store)) -> PlacementLifecycle:
    return PlacementLifecycle(store)


def get_postings(store: CollectionStore = Depends(get_store)) -> PostingService:
    return PostingService(store)


def get_accounts(store: CollectionStore = Depends(get_store)) -> AccountService:
    return AccountService(store)


def get_reports(store: CollectionStore = Depends(get_store)) -> ReportService:
    return ReportService(store)
