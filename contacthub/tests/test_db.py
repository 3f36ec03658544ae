import unittest

from contacthub.db import InMemoryDbClient, SqlDbClient
from contacthub.errors import EmailAlreadyRegistered


class DbClientContract:
    """Shared checks run against every DbClient implementation."""

    def make_db(self):
        raise NotImplementedError

    def setUp(self):
        self.db = self.make_db()

    def test_create_and_find_user(self):
        user = self.db.create_user("Ann", "a@x.com", "hash")
        self.assertTrue(user.user_id)
        found = self.db.find_user_by_email("a@x.com")
        self.assertEqual(found.user_id, user.user_id)
        self.assertEqual(self.db.get_user(user.user_id).name, "Ann")
        self.assertIsNone(self.db.find_user_by_email("missing@x.com"))

    def test_duplicate_email_raises(self):
        self.db.create_user("Ann", "a@x.com", "hash")
        with self.assertRaises(EmailAlreadyRegistered):
            self.db.create_user("Other", "a@x.com", "hash2")

    def test_contact_lifecycle(self):
        contact = self.db.insert_contact(
            "u1", name="Bob", email="b@x.com", tags=["work", "work"]
        )
        self.assertEqual(self.db.list_contacts("u1")[0].tags, ["work", "work"])
        self.assertEqual(self.db.list_contacts("u2"), [])

        contact.name = "Robert"
        contact.tags = ["friend"]
        self.db.save_contact(contact)
        stored = self.db.get_contact(contact.contact_id)
        self.assertEqual(stored.name, "Robert")
        self.assertEqual(stored.tags, ["friend"])
        self.assertEqual(stored.photo, "")

        self.assertFalse(self.db.delete_contact(contact.contact_id, "u2"))
        self.assertTrue(self.db.delete_contact(contact.contact_id, "u1"))
        self.assertIsNone(self.db.get_contact(contact.contact_id))
        self.assertFalse(self.db.delete_contact(contact.contact_id, "u1"))

    def test_returned_contact_is_detached(self):
        contact = self.db.insert_contact("u1", name="Bob", email="b@x.com", tags=["a"])
        contact.tags.append("b")
        self.assertEqual(self.db.get_contact(contact.contact_id).tags, ["a"])

    def test_activity_timestamps_never_decrease(self):
        for i in range(5):
            self.db.append_activity("u1", "Added a new contact", f"c{i}")
        self.db.append_activity("u2", "Added a new contact", "other")
        records = self.db.list_activities("u1")
        self.assertEqual([r.contact_id for r in records], [f"c{i}" for i in range(5)])
        stamps = [r.timestamp for r in records]
        self.assertEqual(stamps, sorted(stamps))


class InMemoryDbClientTests(DbClientContract, unittest.TestCase):
    def make_db(self):
        return InMemoryDbClient()

    def test_reset(self):
        self.db.create_user("Ann", "a@x.com", "hash")
        self.db.insert_contact("u1", name="Bob", email="b@x.com")
        self.db.reset()
        self.assertEqual(self.db.users, {})
        self.assertEqual(self.db.contacts, {})


class SqlDbClientTests(DbClientContract, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL client logic.
    """

    def make_db(self):
        return SqlDbClient("sqlite+pysqlite:///:memory:")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            SqlDbClient("")


if __name__ == "__main__":
    unittest.main()
