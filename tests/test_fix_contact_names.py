from unittest import TestCase

from contact_engagement.core.application.commands.reconciliation_commands import FixInvalidContactNamesCommand
from contact_engagement.core.application.handlers.maintenance_handlers import FixInvalidContactNamesHandler
from tests.helpers.fakes import InMemoryContactRepository, make_contact


class FixInvalidContactNamesHandlerTests(TestCase):
    def setUp(self):
        self.contacts = InMemoryContactRepository([
            make_contact(1, number="5511911111111", name="5511911111111"),
            make_contact(2, number="5511922222222", name="Maria"),
            make_contact(3, number="5511933333333", name="123456789012345678@lid"),
            make_contact(4, number="5511944444444", name=""),
            make_contact(5, number="5511955555555", name="José"),
        ])
        self.handler = FixInvalidContactNamesHandler(self.contacts)

    def test_batches_follow_explicit_cursor(self):
        first = self.handler.handle(FixInvalidContactNamesCommand(batch_size=3))

        self.assertEqual((first.processed, first.updated, first.last_cursor), (3, 2, 3))
        self.assertEqual(self.contacts.contacts[1].name, "Contato 5511911111111")
        self.assertEqual(self.contacts.contacts[3].name, "Contato 5511933333333")

        second = self.handler.handle(FixInvalidContactNamesCommand(batch_size=3, start_after=first.last_cursor))

        self.assertEqual((second.processed, second.updated, second.last_cursor), (2, 1, 5))
        self.assertEqual(self.contacts.contacts[4].name, "Contato 5511944444444")

        done = self.handler.handle(FixInvalidContactNamesCommand(batch_size=3, start_after=second.last_cursor))
        self.assertEqual((done.processed, done.last_cursor), (0, 5))

    def test_rerun_changes_nothing(self):
        self.handler.handle(FixInvalidContactNamesCommand(batch_size=10))
        writes = self.contacts.writes

        result = self.handler.handle(FixInvalidContactNamesCommand(batch_size=10))

        self.assertEqual(result.updated, 0)
        self.assertEqual(self.contacts.writes, writes)
