"""Rule configuration store: fresh reads and merge-validate updates."""

from __future__ import annotations

from django.test import TestCase

from apps.audit.models import AuditLog
from apps.bookings.application.rule_config import ensure_rules, get_rules, update_rules
from apps.bookings.domain.errors import RuleConfigError
from apps.bookings.models import RuleConfig

from .factories import make_rules, make_user


class RuleConfigStoreTests(TestCase):
    def test_missing_configuration_is_reported(self) -> None:
        with self.assertRaises(RuleConfigError) as ctx:
            get_rules()
        self.assertEqual(ctx.exception.code, "RULES_NOT_FOUND")

    def test_ensure_rules_creates_defaults_once(self) -> None:
        config, created = ensure_rules()
        self.assertTrue(created)
        self.assertEqual(config.open_hour, 8)
        self.assertIsNone(config.max_consecutive)

        _, created_again = ensure_rules({"open_hour": 6})
        self.assertFalse(created_again)
        self.assertEqual(get_rules().open_hour, 8)

    def test_ensure_rules_validates_overrides(self) -> None:
        with self.assertRaises(RuleConfigError) as ctx:
            ensure_rules({"open_hour": 23, "close_hour": 22})
        self.assertEqual(ctx.exception.code, "INVALID_HOURS")
        self.assertFalse(RuleConfig.objects.exists())

    def test_reads_are_never_stale(self) -> None:
        make_rules()
        self.assertEqual(get_rules().max_active_bookings, 3)

        RuleConfig.objects.filter(pk=1).update(max_active_bookings=5)

        self.assertEqual(get_rules().max_active_bookings, 5)

    def test_partial_update_merges_and_persists(self) -> None:
        make_rules()

        config = update_rules({"max_duration_minutes": 90, "cooldown_minutes": 10})

        self.assertEqual(config.max_duration_minutes, 90)
        rules = get_rules()
        self.assertEqual(rules.max_duration_minutes, 90)
        self.assertEqual(rules.cooldown_minutes, 10)
        self.assertEqual(rules.min_duration_minutes, 30)

    def test_update_validates_the_merged_record(self) -> None:
        make_rules()

        with self.assertRaises(RuleConfigError) as ctx:
            update_rules({"min_duration_minutes": 150})

        self.assertEqual(ctx.exception.code, "INVALID_DURATION_RANGE")
        self.assertEqual(get_rules().min_duration_minutes, 30)

    def test_nullable_limits_can_be_cleared(self) -> None:
        make_rules(max_consecutive=2)

        update_rules({"max_consecutive": None})

        self.assertIsNone(get_rules().max_consecutive)

    def test_rejects_empty_unknown_and_malformed_changes(self) -> None:
        make_rules()
        cases = [
            ({}, "EMPTY_RULE_UPDATE"),
            ({"colour": 1}, "UNKNOWN_RULE_FIELD"),
            ({"open_hour": None}, "INVALID_RULE_VALUE"),
            ({"open_hour": "9"}, "INVALID_RULE_VALUE"),
            ({"open_hour": True}, "INVALID_RULE_VALUE"),
        ]
        for changes, code in cases:
            with self.subTest(changes=changes):
                with self.assertRaises(RuleConfigError) as ctx:
                    update_rules(changes)
                self.assertEqual(ctx.exception.code, code)

    def test_update_without_record_fails(self) -> None:
        with self.assertRaises(RuleConfigError) as ctx:
            update_rules({"open_hour": 9})
        self.assertEqual(ctx.exception.code, "RULES_NOT_FOUND")

    def test_update_is_audited_after_commit(self) -> None:
        make_rules()
        admin = make_user("root", is_staff=True)

        with self.captureOnCommitCallbacks(execute=True):
            update_rules({"open_hour": 7}, actor_id=admin.id)

        entry = AuditLog.objects.get(action="rules_updated")
        self.assertEqual(entry.actor_id, admin.id)
        self.assertEqual(entry.entity_type, "rule_config")
        self.assertEqual(entry.payload["before"]["open_hour"], 8)
        self.assertEqual(entry.payload["after"]["open_hour"], 7)
        self.assertEqual(entry.payload["changes"], {"open_hour": 7})
