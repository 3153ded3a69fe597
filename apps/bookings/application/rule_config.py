"""
Rule Configuration Store

The booking policy is a single database record. Every read goes to the
database so a request never validates against a policy older than the last
committed update. Updates merge the changes into the current record and
validate the merged result before writing it.
"""

from typing import Any, Mapping
import logging

from django.db import DEFAULT_DB_ALIAS

from shared.application.uow import DjangoUnitOfWork
from apps.bookings.domain.errors import RuleConfigError
from apps.bookings.domain.events import RulesUpdated
from apps.bookings.domain.rules import BookingRules, validate_rule_values
from apps.bookings.models import RULE_CONFIG_ID, RuleConfig

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = frozenset({'max_consecutive', 'cooldown_minutes'})


def get_rule_config(*, using: str = DEFAULT_DB_ALIAS) -> RuleConfig:
    config = RuleConfig.objects.using(using).filter(pk=RULE_CONFIG_ID).first()
    if config is None:
        raise RuleConfigError('RULES_NOT_FOUND', 'Rule configuration not found')
    return config


def get_rules(*, using: str = DEFAULT_DB_ALIAS) -> BookingRules:
    """Return the active policy as an immutable snapshot."""
    return get_rule_config(using=using).to_rules()


def ensure_rules(defaults: Mapping[str, Any] | None = None) -> tuple[RuleConfig, bool]:
    """Create the policy record from ``defaults`` unless it already exists."""
    values = dict(RuleConfig.DEFAULTS)
    values.update(defaults or {})
    validate_rule_values(values)
    return RuleConfig.objects.get_or_create(pk=RULE_CONFIG_ID, defaults=values)


def _clean_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    if not changes:
        raise RuleConfigError('EMPTY_RULE_UPDATE', 'At least one rule field must be provided for update')

    known = set(BookingRules.field_names())
    unknown = sorted(set(changes) - known)
    if unknown:
        raise RuleConfigError('UNKNOWN_RULE_FIELD', f"Unknown rule field(s): {', '.join(unknown)}")

    cleaned = {}
    for name, value in changes.items():
        if value is None:
            if name not in NULLABLE_FIELDS:
                raise RuleConfigError('INVALID_RULE_VALUE', f'{name} cannot be null')
        elif isinstance(value, bool) or not isinstance(value, int):
            raise RuleConfigError('INVALID_RULE_VALUE', f'{name} must be an integer')
        cleaned[name] = value
    return cleaned


def update_rules(changes: Mapping[str, Any], *, actor_id: int | None = None) -> RuleConfig:
    """
    Merge ``changes`` into the active policy.

    The whole merged record is validated, so a partial update can never
    leave the policy internally inconsistent (e.g. min duration above max).

    Raises:
        RuleConfigError: if the record is missing or the merged record is invalid
    """
    cleaned = _clean_changes(changes)

    with DjangoUnitOfWork() as uow:
        config = RuleConfig.objects.select_for_update().filter(pk=RULE_CONFIG_ID).first()
        if config is None:
            raise RuleConfigError('RULES_NOT_FOUND', 'Rule configuration not found')

        before = config.to_rules().as_dict()
        merged = {**before, **cleaned}
        validate_rule_values(merged)

        for name, value in cleaned.items():
            setattr(config, name, value)
        config.save()

        uow.add_event(RulesUpdated(
            aggregate_id=config.pk,
            actor_id=actor_id,
            before=before,
            after=merged,
            changes=cleaned,
        ))

    logger.info(f"Booking rules updated by {actor_id}: {cleaned}")
    return config
