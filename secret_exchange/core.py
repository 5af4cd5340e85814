from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from .services.contacts import ContactMatcher
from .services.derangement import DerangementAssigner
from .services.identifiers import IdentifierGenerator


EXTENSION_KEY = "secret_exchange.core"


@dataclass(frozen=True)
class ExchangeCore:
    identifiers: IdentifierGenerator
    contacts: ContactMatcher
    assigner: DerangementAssigner


def init_core(app: Flask, core: ExchangeCore | None = None) -> ExchangeCore:
    """Builds the core components from app.config unless one is supplied."""
    if core is None:
        core = ExchangeCore(
            identifiers=IdentifierGenerator(),
            contacts=ContactMatcher(
                rounds=app.config["CONTACT_HASH_ROUNDS"],
                memory_cost=app.config["CONTACT_HASH_MEMORY_COST"],
            ),
            assigner=DerangementAssigner(max_attempts=app.config["ASSIGNMENT_MAX_ATTEMPTS"]),
        )
    app.extensions[EXTENSION_KEY] = core
    return core


def get_core() -> ExchangeCore:
    return current_app.extensions[EXTENSION_KEY]
