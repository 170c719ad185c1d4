"""Infrastructure utilities for Streamlit UI operations.

This module abstracts Streamlit-specific infrastructure (st.rerun, st.session_state)
to enable mockability in tests.

Pattern: Controllers and views import from this module. Tests patch these
functions instead of every place where st.rerun might be called directly.
"""

import logging
from typing import Any

import streamlit as st

logger = logging.getLogger(__name__)


def trigger_rerun(scope: str = "app") -> None:
    """Trigger Streamlit rerun with optional scope.

    In tests, patch 'heritage_atlas.ui.infra.trigger_rerun' to prevent
    actual reruns (which raise StopExecution).

    Args:
        scope: Rerun scope - "app" for full rerun, "fragment" for partial.
    """
    st.rerun(scope=scope)


def bump_map_version(key: str = "map_version") -> int:
    """Increment a map version to create a fresh st_deckgl component.

    A new component key has no memory of previous click events and picks up
    a changed initial view state (e.g. after centering on a searched address).

    Returns:
        The new version.
    """
    old_version = st.session_state.get(key, 0)
    new_version = old_version + 1
    st.session_state[key] = new_version
    logger.info(f"[MAP] Bumped {key}: {old_version} -> {new_version}")
    return new_version


class StreamlitUIListener:
    """python-statemachine listener that reruns the app after every transition.

    Usage:
        sm = PopupStateMachine()
        sm.add_listener(StreamlitUIListener())
    """

    def after_transition(self, event: str, source: Any, target: Any) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name}")
        trigger_rerun()
