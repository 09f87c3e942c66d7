"""
Persistence of risk profiles, saved plans and recommendation feedback.

Records are JSON strings in an opaque key-value store. Two stores are
provided: an in-memory dict (tests, scripts) and a JSON file on disk. A
failed save raises StorageError and never touches the computed results
being saved; corrupt stored values are logged and treated as absent.

Keys:
    riskProfiles              list of saved profiles
    riskProfile.latest        most recently saved RiskProfileResult
    portfolioPlan.<id>        one saved plan
    portfolioPlans.index      list of {id, name, timestamp}
    portfolioReco.history     recommendation feedback, newest last
"""

import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from .export import goal_from_dict, risk_profile_from_dict, to_plain
from .params import AssetAllocation, FeedbackAction, Goal, RiskProfileResult

logger = logging.getLogger(__name__)

RISK_PROFILES_KEY = 'riskProfiles'
LATEST_PROFILE_KEY = 'riskProfile.latest'
PLAN_KEY_PREFIX = 'portfolioPlan.'
PLAN_INDEX_KEY = 'portfolioPlans.index'
FEEDBACK_KEY = 'portfolioReco.history'

PLAN_VERSION = '1.0.0'
MAX_FEEDBACK_ENTRIES = 50

# Adaptive tilt: this many rejects inside the window lowers the equity tilt
REJECT_THRESHOLD = 3
REJECT_WINDOW = timedelta(days=30)
REJECT_EQUITY_TILT = -5


class StorageError(RuntimeError):
    """Raised when a record cannot be written to the store."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryStore:
    """Dict-backed store."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """
    Store backed by a single JSON object on disk.

    The file is read on every get and rewritten on every set, so several
    store instances pointing at one path stay consistent.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text())
        except json.JSONDecodeError:
            logger.warning("Store file %s is not valid JSON; treating it as empty", self.path)
            return {}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        try:
            self.path.write_text(json.dumps(data, indent=2))
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return moment.replace(tzinfo=timezone.utc) if moment.tzinfo is None else moment


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def _load(store: KeyValueStore, key: str, default: Any) -> Any:
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring corrupt value stored under %r", key)
        return default


def _save(store: KeyValueStore, key: str, value: Any) -> None:
    try:
        text = json.dumps(to_plain(value))
    except (TypeError, ValueError) as e:
        raise StorageError(f"Value for {key!r} is not JSON serializable: {e}") from e
    store.set(key, text)


# =============================================================================
# Risk Profiles
# =============================================================================

def save_risk_profile(
    store: KeyValueStore,
    result: RiskProfileResult,
    name: str = 'My Risk Profile',
) -> str:
    """Append a profile to the saved list and make it the latest. Returns its id."""
    profile_id = _new_id('profile')
    profiles = _load(store, RISK_PROFILES_KEY, [])
    profiles.append({
        'id': profile_id,
        'name': name,
        'result': to_plain(result),
        'created_at': _now().isoformat(),
    })
    _save(store, RISK_PROFILES_KEY, profiles)
    _save(store, LATEST_PROFILE_KEY, result)
    return profile_id


def load_latest_risk_profile(store: KeyValueStore) -> Optional[RiskProfileResult]:
    data = _load(store, LATEST_PROFILE_KEY, None)
    return risk_profile_from_dict(data) if data else None


def load_all_risk_profiles(store: KeyValueStore) -> List[Dict[str, Any]]:
    """Saved profiles as stored, with each 'result' rebuilt into a RiskProfileResult."""
    profiles = _load(store, RISK_PROFILES_KEY, [])
    return [dict(p, result=risk_profile_from_dict(p['result'])) for p in profiles]


# =============================================================================
# Portfolio Plans
# =============================================================================

def save_plan(
    store: KeyValueStore,
    name: str,
    goal: Goal,
    allocation: AssetAllocation,
    rationale: str,
    projection: Any,
    notes: Optional[str] = None,
) -> str:
    """Save a plan under its own key and add it to the index. Returns the plan id."""
    plan_id = _new_id('plan')
    timestamp = _now().isoformat()
    plan = {
        'id': plan_id,
        'name': name,
        'notes': notes,
        'goal': to_plain(goal),
        'allocation': to_plain(allocation),
        'rationale': rationale,
        'projection': to_plain(projection),
        'timestamp': timestamp,
        'version': PLAN_VERSION,
    }
    _save(store, PLAN_KEY_PREFIX + plan_id, plan)

    index = _load(store, PLAN_INDEX_KEY, [])
    index.append({'id': plan_id, 'name': name, 'timestamp': timestamp})
    _save(store, PLAN_INDEX_KEY, index)
    logger.debug("Saved plan %s (%s)", plan_id, name)
    return plan_id


def load_plan(store: KeyValueStore, plan_id: str) -> Optional[Dict[str, Any]]:
    """A saved plan as a dict, with 'allocation' and 'goal' rebuilt into dataclasses."""
    plan = _load(store, PLAN_KEY_PREFIX + plan_id, None)
    if plan is None:
        return None
    plan['allocation'] = AssetAllocation.from_dict(plan['allocation'])
    plan['goal'] = goal_from_dict(plan['goal'])
    return plan


def list_plans(store: KeyValueStore) -> List[Dict[str, str]]:
    return _load(store, PLAN_INDEX_KEY, [])


# =============================================================================
# Recommendation Feedback
# =============================================================================

def record_feedback(
    store: KeyValueStore,
    action: FeedbackAction,
    plan_id: str,
    metadata: Optional[Dict[str, Any]] = None,
    timestamp: Optional[datetime] = None,
) -> None:
    """Append a feedback entry, keeping only the most recent 50."""
    history = _load(store, FEEDBACK_KEY, [])
    history.append({
        'action': FeedbackAction(action).value,
        'plan_id': plan_id,
        'metadata': metadata,
        'timestamp': (timestamp or _now()).isoformat(),
    })
    _save(store, FEEDBACK_KEY, history[-MAX_FEEDBACK_ENTRIES:])


def load_feedback(store: KeyValueStore) -> List[Dict[str, Any]]:
    return _load(store, FEEDBACK_KEY, [])


def adaptive_adjustments(
    history: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> Dict[str, float]:
    """
    Equity tilt learned from feedback.

    Three or more rejected recommendations in the last 30 days give a -5
    point equity tilt; anything else gives 0. Naive timestamps (stored or
    passed as now) are read as UTC.

    Returns:
        {'equity_tilt_adjustment': tilt}, where tilt is passed to
        recommend_portfolio(equity_tilt=...)
    """
    cutoff = _as_utc(now or _now()) - REJECT_WINDOW
    recent_rejects = [
        entry for entry in history
        if entry.get('action') == FeedbackAction.REJECT.value
        and _as_utc(datetime.fromisoformat(entry['timestamp'])) > cutoff
    ]
    tilt = REJECT_EQUITY_TILT if len(recent_rejects) >= REJECT_THRESHOLD else 0
    return {'equity_tilt_adjustment': tilt}
