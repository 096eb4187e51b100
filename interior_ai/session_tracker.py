"""
Session Tracker - Records what happened in the current session only
No database or persistent storage required
"""

import streamlit as st
from datetime import datetime
from typing import Dict, List, Optional, Any
import logging

logger = logging.getLogger(__name__)

MAX_EVENTS = 50

COUNTERS = (
    'analyses_started',
    'analyses_succeeded',
    'analyses_failed',
    'visualizations_succeeded',
    'visualizations_failed',
    'stale_results_dropped',
    'ingestion_errors',
)


class SessionTracker:
    """Tracks remote-call outcomes within the current Streamlit session"""

    def __init__(self, store: Optional[Any] = None):
        # st.session_state by default; any dict works (tests)
        self._store = store if store is not None else st.session_state
        self.init_session_state()

    def init_session_state(self):
        """Initialize tracking keys in the backing store"""
        if 'diagnostic_events' not in self._store:
            self._store['diagnostic_events'] = []
        if 'diagnostic_counters' not in self._store:
            self._store['diagnostic_counters'] = {name: 0 for name in COUNTERS}
        if 'session_start' not in self._store:
            self._store['session_start'] = datetime.now()

    def track_event(self, kind: str, **details):
        """Record one event and bump its counter"""
        try:
            event = {'type': kind, 'timestamp': datetime.now().isoformat()}
            event.update(details)
            events = self._store['diagnostic_events']
            events.append(event)

            # Keep only the last MAX_EVENTS events
            if len(events) > MAX_EVENTS:
                self._store['diagnostic_events'] = events[-MAX_EVENTS:]

            counters = self._store['diagnostic_counters']
            counters[kind] = counters.get(kind, 0) + 1
        except Exception as e:
            logger.warning(f"Failed to track {kind}: {e}")

    @property
    def events(self) -> List[Dict]:
        return list(self._store.get('diagnostic_events', []))

    def count(self, kind: str) -> int:
        return self._store.get('diagnostic_counters', {}).get(kind, 0)

    def get_session_insights(self) -> Dict:
        """Get insights from current session"""
        try:
            counters = dict(self._store['diagnostic_counters'])
            return {
                'session_duration': (datetime.now() - self._store['session_start']).seconds,
                'rooms_analyzed': counters.get('analyses_succeeded', 0),
                'analysis_failures': counters.get('analyses_failed', 0),
                'redesigns_generated': counters.get('visualizations_succeeded', 0),
                'redesign_failures': counters.get('visualizations_failed', 0),
                'counters': counters,
            }
        except Exception as e:
            logger.warning(f"Failed to get session insights: {e}")
            return {
                'session_duration': 0,
                'rooms_analyzed': 0,
                'analysis_failures': 0,
                'redesigns_generated': 0,
                'redesign_failures': 0,
                'counters': {},
            }
