from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from ..access.policy import AccessPolicy, can_access_office, is_global_admin
from ..core.exceptions import AuthorizationError, NotFoundError
from ..sessions.model import RequestContext
from .model import Office
from .operations import CreateOffice, DeleteOffice, GetOffice, ListOffices, ToggleShare, UpdateOffice
from .repository import OfficeRepository

logger = logging.getLogger(__name__)


class OfficeService:
    """Use case: manage offices. Admins manage, everybody reads shared offices."""

    def __init__(self, offices: OfficeRepository, policy: AccessPolicy):
        self._offices = offices
        self._policy = policy
        self._handlers: Dict[type, Callable[[RequestContext, Any], Any]] = {
            ListOffices: self._list,
            GetOffice: self._get,
            CreateOffice: self._create,
            UpdateOffice: self._update,
            DeleteOffice: self._delete,
            ToggleShare: self._toggle_share,
        }

    def dispatch(self, ctx: RequestContext, op) -> Any:
        return self._handlers[type(op)](ctx, op)

    def get_office(self, office_id: int) -> Office:
        office = self._offices.get_by_id(office_id)
        if not office:
            raise NotFoundError("Office not found")
        return office

    def _list(self, ctx: RequestContext, op: ListOffices) -> list:
        offices = self._offices.list_offices(shared_only=not is_global_admin(ctx))
        return [o.to_dict() for o in offices]

    def _get(self, ctx: RequestContext, op: GetOffice) -> dict:
        office = self.get_office(op.office_id)
        if not can_access_office(ctx, office):
            raise AuthorizationError("You do not have access to this office")
        return office.to_dict()

    def _create(self, ctx: RequestContext, op: CreateOffice) -> dict:
        self._policy.require_global_admin(ctx, "Only admins can create offices")
        office_id = self._offices.create_office(
            name=op.office_name,
            location=op.location,
            is_shared=op.is_shared,
            created_by=ctx.user_id,
        )
        logger.info("Office %s created by user %s", office_id, ctx.user_id)
        return self.get_office(office_id).to_dict()

    def _update(self, ctx: RequestContext, op: UpdateOffice) -> dict:
        self._policy.require_global_admin(ctx, "Only admins can update offices")
        if not self._offices.update_office(op.office_id, op.columns()):
            raise NotFoundError("Office not found")
        return self.get_office(op.office_id).to_dict()

    def _delete(self, ctx: RequestContext, op: DeleteOffice) -> dict:
        self._policy.require_global_admin(ctx, "Only admins can delete offices")
        if not self._offices.delete_by_id(op.office_id):
            raise NotFoundError("Office not found")
        return {"success": True}

    def _toggle_share(self, ctx: RequestContext, op: ToggleShare) -> dict:
        self._policy.require_global_admin(ctx, "Only admins can toggle office sharing")
        if not self._offices.update_office(op.office_id, {"is_shared": op.is_shared}):
            raise NotFoundError("Office not found")
        return self.get_office(op.office_id).to_dict()
