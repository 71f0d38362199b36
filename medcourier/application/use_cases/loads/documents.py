# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from medcourier.domain.auth.entities import Principal
from medcourier.domain.loads.entities import DocumentRecord, LoadRecord
from medcourier.domain.loads.status import DOCUMENT_LOCKING_STATUSES
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.shared.errors import AuthorizationError, ConflictError, NotFoundError
from medcourier.shared.logging import logger

from .access import is_assigned_driver, is_owning_shipper, load_for
from .transitions import actor_type


class LoadDocuments:
    """Document metadata attached to a load.

    Anyone who can see the load can list its documents. Uploading and
    deleting is limited to admins, the owning shipper and the assigned
    driver. Documents are locked once the load is delivered.
    """

    def __init__(self, loads: SqlAlchemyLoadRepository) -> None:
        self._loads = loads

    def list(self, principal: Principal, load_id: str) -> list[DocumentRecord]:
        load = load_for(self._loads, principal, load_id)
        return self._loads.list_documents(load.id)

    def upload(
        self, principal: Principal, load_id: str, data: Mapping[str, Any]
    ) -> DocumentRecord:
        load = self._writable_load(principal, load_id)
        document = self._loads.add_document(
            load.id,
            {
                **data,
                "uploaded_by_type": actor_type(principal),
                "uploaded_by_id": principal.user_id,
            },
            locked=load.status in DOCUMENT_LOCKING_STATUSES,
        )
        logger.info(
            f"documents: {document.document_type} added to {load.tracking_code} "
            f"by {principal.user_type.value}:{principal.user_id}"
        )
        return document

    def delete(self, principal: Principal, load_id: str, document_id: str) -> None:
        load = self._writable_load(principal, load_id)
        document = self._loads.get_document(load.id, document_id)
        if document is None:
            raise NotFoundError("Document")
        if document.is_locked:
            raise ConflictError("Document is locked and cannot be deleted")
        self._loads.delete_document(document.id)
        logger.info(f"documents: {document.id} removed from {load.tracking_code}")

    def _writable_load(self, principal: Principal, load_id: str) -> LoadRecord:
        load = load_for(self._loads, principal, load_id)
        if principal.is_admin or is_owning_shipper(principal, load):
            return load
        if is_assigned_driver(principal, load):
            return load
        raise AuthorizationError("You cannot change documents on this load")


__all__ = ["LoadDocuments"]
