"""
PATH: organizations/services/scope.py

SESSION SCOPE (IDENTITY COLLABORATOR)

Purpose:
- Answer "who is acting, for which organization, at which branch?"
- Every persisted POS row is stamped with these scoping values.

Resolution priority for the branch:
1) request.query_params.branch_id
2) request.data.branch_id
3) request.user.default_branch
"""

from __future__ import annotations

from dataclasses import dataclass

from django.shortcuts import get_object_or_404
from rest_framework import serializers

from organizations.models import Branch, Organization


@dataclass(frozen=True)
class SessionScope:
    user: object
    organization: Organization
    branch: Branch

    @property
    def user_id(self):
        return getattr(self.user, "id", None)

    @property
    def organization_id(self):
        return self.organization.id

    @property
    def branch_id(self):
        return self.branch.id


def build_scope(*, user, branch: Branch) -> SessionScope:
    """
    Scope for non-HTTP callers (management commands, tests).
    """
    return SessionScope(user=user, organization=branch.organization, branch=branch)


def resolve_scope(*, request) -> SessionScope:
    user = request.user

    organization = getattr(user, "organization", None)
    if organization is None or not organization.is_active:
        raise serializers.ValidationError(
            {"organization": "User is not attached to an active organization."}
        )

    raw = (request.query_params.get("branch_id") or "").strip()
    if not raw and isinstance(request.data, dict):
        raw = str(request.data.get("branch_id") or "").strip()

    if raw:
        branch = get_object_or_404(
            Branch, id=raw, organization=organization, is_active=True
        )
        return SessionScope(user=user, organization=organization, branch=branch)

    branch = getattr(user, "default_branch", None)
    if branch is None or not branch.is_active or branch.organization_id != organization.id:
        raise serializers.ValidationError(
            {"branch_id": "branch_id is required for POS operations (branch scope)."}
        )

    return SessionScope(user=user, organization=organization, branch=branch)
