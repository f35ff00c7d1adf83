from unittest import TestCase
from unittest.mock import patch

import httpx

from contact_engagement.adapters.observability.metrics import registry, render_metrics
from contact_engagement.adapters.notifiers.whatsapp.whatsapp_sender import WhatsappGatewaySender
from contact_engagement.core.domain.entities.messaging_entity import ChannelEntity, TicketEntity
from contact_engagement.core.domain.events.exceptions import (
    ChannelUnavailableError,
    RejectedError,
    TransientError,
)

REQUEST_PATH = "contact_engagement.adapters.notifiers.base.httpx.request"


class WhatsappGatewaySenderTests(TestCase):
    def setUp(self):
        self.sender = WhatsappGatewaySender(apikey="k-1", endpoint="http://gateway.local/")
        self.channel = ChannelEntity(id=6, company_id=4, name="principal")
        self.ticket = TicketEntity(id=9, company_id=4, contact_id=10, channel_id=6, contact_number="5511911111111")

    def test_sends_text_and_returns_delivery_id(self):
        with patch(REQUEST_PATH, return_value=httpx.Response(201, json={"key": {"id": "ABC123"}})) as request:
            receipt = self.sender.send(self.channel, self.ticket, "Parabéns!")

        self.assertEqual(receipt.delivery_id, "ABC123")
        method, url = request.call_args.args
        self.assertEqual((method, url), ("POST", "http://gateway.local/message/sendText/principal"))
        payload = request.call_args.kwargs["json"]
        self.assertEqual(payload["number"], "5511911111111")
        self.assertEqual(payload["textMessage"], {"text": "Parabéns!"})
        self.assertEqual(request.call_args.kwargs["headers"]["apikey"], "k-1")

    def test_response_without_id(self):
        with patch(REQUEST_PATH, return_value=httpx.Response(200, json={"status": "PENDING"})):
            receipt = self.sender.send(self.channel, self.ticket, "oi")

        self.assertIsNone(receipt.delivery_id)

    def test_gateway_metrics_are_exported(self):
        labels = {"provider": "whatsapp-gateway", "channel": "whatsapp"}
        before = registry.get_sample_value("notifier_success_total", labels) or 0

        with patch(REQUEST_PATH, return_value=httpx.Response(200, json={"id": "X1"})):
            self.sender.send(self.channel, self.ticket, "oi")

        self.assertEqual(registry.get_sample_value("notifier_success_total", labels), before + 1)
        body, _ = render_metrics()
        self.assertIn(b"notifier_success_total", body)
        self.assertIn(b"notifier_request_seconds", body)

    def test_status_mapping(self):
        cases = [
            (400, RejectedError),
            (401, RejectedError),
            (409, ChannelUnavailableError),
            (429, TransientError),
            (503, TransientError),
        ]
        for status, expected in cases:
            with self.subTest(status=status), patch(REQUEST_PATH, return_value=httpx.Response(status)):
                with self.assertRaises(expected):
                    self.sender.send(self.channel, self.ticket, "oi")

    def test_timeout_is_transient(self):
        with patch(REQUEST_PATH, side_effect=httpx.ReadTimeout("lento")) as request:
            with self.assertRaises(TransientError):
                self.sender.send(self.channel, self.ticket, "oi")

        self.assertEqual(request.call_count, 1)

    def test_disconnected_channel(self):
        self.channel.status = "DISCONNECTED"

        with patch(REQUEST_PATH) as request:
            with self.assertRaises(ChannelUnavailableError):
                self.sender.send(self.channel, self.ticket, "oi")

        request.assert_not_called()
