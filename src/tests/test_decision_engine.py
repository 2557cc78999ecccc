"""Access decision engine tests: traversal, soft-delete inertness, edge cases."""

from __future__ import annotations

import uuid

from django.test import TestCase

from access_control.exceptions import InvalidInput, NotFound
from access_control.models import RolePermission, UserRole
from access_control.services import AccessDecisionEngine, AssignmentManager, EntityStore


class AccessCheckTests(TestCase):
    """check(user, action) over User -> Role -> Permission."""

    def setUp(self):
        self.user = EntityStore.create_user("u1@example.com", "hash")
        self.role = EntityStore.create_role("editor")
        self.permission = EntityStore.create_permission("edit:post")

    def _grant(self):
        AssignmentManager.assign_role(self.user.pk, self.role.pk)
        AssignmentManager.assign_permission(self.role.pk, self.permission.pk)

    def test_user_without_roles_is_denied(self):
        self.assertFalse(AccessDecisionEngine.check(self.user.pk, "edit:post"))

    def test_role_without_permissions_is_denied(self):
        AssignmentManager.assign_role(self.user.pk, self.role.pk)

        self.assertFalse(AccessDecisionEngine.check(self.user.pk, "edit:post"))

    def test_granted_action_is_allowed(self):
        self._grant()

        self.assertTrue(AccessDecisionEngine.check(self.user.pk, "edit:post"))
        self.assertTrue(AccessDecisionEngine.check(str(self.user.pk), "edit:post"))

    def test_matching_is_exact(self):
        self._grant()

        self.assertFalse(AccessDecisionEngine.check(self.user.pk, "Edit:Post"))
        self.assertFalse(AccessDecisionEngine.check(self.user.pk, "edit:*"))
        self.assertFalse(AccessDecisionEngine.check(self.user.pk, "edit:post "))

    def test_deleted_role_makes_grant_inert_but_keeps_rows(self):
        self._grant()

        EntityStore.soft_delete("role", self.role.pk)

        self.assertFalse(AccessDecisionEngine.check(self.user.pk, "edit:post"))
        self.assertTrue(UserRole.objects.filter(user=self.user, role=self.role).exists())
        self.assertTrue(RolePermission.objects.filter(role=self.role, permission=self.permission).exists())

    def test_deleted_permission_makes_grant_inert(self):
        self._grant()

        EntityStore.soft_delete("permission", self.permission.pk)

        self.assertFalse(AccessDecisionEngine.check(self.user.pk, "edit:post"))
        self.assertTrue(RolePermission.objects.filter(role=self.role, permission=self.permission).exists())

    def test_other_active_role_still_grants(self):
        backup = EntityStore.create_role("backup-editor")
        self._grant()
        AssignmentManager.assign_role(self.user.pk, backup.pk)
        AssignmentManager.assign_permission(backup.pk, self.permission.pk)

        EntityStore.soft_delete("role", self.role.pk)

        self.assertTrue(AccessDecisionEngine.check(self.user.pk, "edit:post"))

    def test_removed_assignment_denies(self):
        self._grant()

        AssignmentManager.remove_role(self.user.pk, self.role.pk)

        self.assertFalse(AccessDecisionEngine.check(self.user.pk, "edit:post"))

    def test_unknown_or_deleted_user_is_not_found(self):
        with self.assertRaises(NotFound):
            AccessDecisionEngine.check(uuid.uuid4(), "edit:post")

        self._grant()
        EntityStore.soft_delete("user", self.user.pk)
        with self.assertRaises(NotFound):
            AccessDecisionEngine.check(self.user.pk, "edit:post")

    def test_invalid_input(self):
        with self.assertRaises(InvalidInput):
            AccessDecisionEngine.check("not-a-uuid", "edit:post")
        with self.assertRaises(InvalidInput):
            AccessDecisionEngine.check(self.user.pk, "")

    def test_effective_actions_unions_active_roles(self):
        reviewer = EntityStore.create_role("reviewer")
        review = EntityStore.create_permission("review:post")
        self._grant()
        AssignmentManager.assign_role(self.user.pk, reviewer.pk)
        AssignmentManager.assign_permission(reviewer.pk, review.pk)
        AssignmentManager.assign_permission(reviewer.pk, self.permission.pk)

        self.assertEqual(
            AccessDecisionEngine.effective_actions(self.user.pk),
            frozenset({"edit:post", "review:post"}),
        )


class EndToEndScenarioTests(TestCase):
    """User u1 gains edit:post through editor, then loses it when editor is deleted."""

    def test_scenario(self):
        u1 = EntityStore.create_user("u1@example.com", "hash")
        editor = EntityStore.create_role("editor")
        edit_post = EntityStore.create_permission("edit:post")

        AssignmentManager.assign_role(u1.pk, editor.pk)
        AssignmentManager.assign_permission(editor.pk, edit_post.pk)

        self.assertTrue(AccessDecisionEngine.check(u1.pk, "edit:post"))
        self.assertFalse(AccessDecisionEngine.check(u1.pk, "delete:post"))

        EntityStore.soft_delete("role", editor.pk)

        self.assertFalse(AccessDecisionEngine.check(u1.pk, "edit:post"))
