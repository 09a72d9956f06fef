"""Unit tests for User domain model: enums, factory, state transitions.

Tests focus on behavior other components rely on:
- UserRole/UserStatus string↔enum conversion (used by the Mongo adapter)
- User.create defaults and display-name derivation
- apply_profile stamping updated_at
"""

import unittest
from datetime import date

from domain.model.user import (
    User,
    UserProfileUpdate,
    UserRegistration,
    UserRole,
    UserStatus,
    default_display_name,
)


def _registration(**overrides) -> UserRegistration:
    fields = dict(
        first_name='  Ada ',
        last_name='Lovelace ',
        email='ada@example.com',
        password='Secret123',
    )
    fields.update(overrides)
    return UserRegistration(**fields)


class TestEnums(unittest.TestCase):

    def test_role_and_status_are_string_enums(self):
        self.assertEqual(UserRole.ADMIN, 'Admin')
        self.assertEqual(UserStatus('Suspended'), UserStatus.SUSPENDED)


class TestDefaultDisplayName(unittest.TestCase):

    def test_blank_display_name_falls_back_to_full_name(self):
        self.assertEqual(default_display_name('Ada', 'Lovelace', None), 'Ada Lovelace')
        self.assertEqual(default_display_name(' Ada ', 'Lovelace', '   '), 'Ada Lovelace')

    def test_explicit_display_name_is_trimmed(self):
        self.assertEqual(default_display_name('Ada', 'Lovelace', '  countess '), 'countess')


class TestUserCreate(unittest.TestCase):

    def test_create_sets_defaults(self):
        """New users are active, non-admin, not deleted, never updated."""
        user = User.create(_registration(), password_hash='hash')

        self.assertEqual(user.role, UserRole.USER)
        self.assertEqual(user.status, UserStatus.ACTIVE)
        self.assertFalse(user.is_deleted)
        self.assertIsNone(user.updated_at)
        self.assertIsNotNone(user.created_at)
        self.assertEqual(len(user.id), 32)

    def test_create_trims_names_and_derives_display_name(self):
        user = User.create(_registration(), password_hash='hash')

        self.assertEqual(user.first_name, 'Ada')
        self.assertEqual(user.last_name, 'Lovelace')
        self.assertEqual(user.display_name, 'Ada Lovelace')
        self.assertEqual(user.full_name, 'Ada Lovelace')

    def test_create_generates_unique_ids(self):
        a = User.create(_registration(), password_hash='hash')
        b = User.create(_registration(), password_hash='hash')
        self.assertNotEqual(a.id, b.id)


class TestUserTransitions(unittest.TestCase):

    def setUp(self):
        self.user = User.create(_registration(phone_number='+8801711112222'), password_hash='hash')

    def test_apply_profile_replaces_fields_and_stamps_updated_at(self):
        self.user.apply_profile(UserProfileUpdate(
            first_name='Augusta',
            last_name='King',
            phone_number=None,
            date_of_birth=date(1990, 12, 10),
        ))

        self.assertEqual(self.user.full_name, 'Augusta King')
        self.assertEqual(self.user.display_name, 'Augusta King')
        self.assertIsNone(self.user.phone_number)
        self.assertEqual(self.user.date_of_birth, date(1990, 12, 10))
        self.assertIsNotNone(self.user.updated_at)

    def test_apply_profile_leaves_email_untouched(self):
        self.user.apply_profile(UserProfileUpdate(first_name='Augusta', last_name='King'))
        self.assertEqual(self.user.email, 'ada@example.com')

    def test_delete_is_soft(self):
        self.user.delete()
        self.assertTrue(self.user.is_deleted)
        self.assertIsNotNone(self.user.updated_at)

    def test_is_admin(self):
        self.assertFalse(self.user.is_admin)
        self.user.change_role(UserRole.ADMIN)
        self.assertTrue(self.user.is_admin)


if __name__ == '__main__':
    unittest.main()
