"""
Service de streaks - backfill des jours manqués et recalcul des streaks
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from habitflow.core.config import settings
from habitflow.core.errors import StorageError
from habitflow.models.habit import HabitLog
from habitflow.services.habit_store import HabitStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakResult:
    current_streak: int
    best_streak: int


def get_today() -> date:
    """Retourne la date d'aujourd'hui (calendrier local)"""
    return date.today()


def to_local_date(utc_timestamp: datetime) -> date:
    """Date calendaire locale d'un timestamp UTC naïf (colonnes remplies par `datetime.utcnow`)"""
    return utc_timestamp.replace(tzinfo=timezone.utc).astimezone().date()


def compute_streaks(logs: Iterable, today: date) -> Optional[StreakResult]:
    """
    Calcule (current_streak, best_streak) depuis l'historique d'une habitude.

    Règles :
    1. Les logs sont parcourus du plus récent au plus ancien.
    2. La streak courante est la série de `completed` en tête de parcours,
       comptée seulement si le log le plus récent date d'aujourd'hui ou d'hier.
    3. Un `missed` ou un jour sans log casse la série.
    4. Un `skipped` est neutre : il ne compte pas et ne casse rien.
    5. best_streak = plus longue série vue pendant le parcours, et >= current.

    Retourne None s'il n'y a aucun log (pas de mise à jour à faire).
    """
    ordered = sorted(logs, key=lambda log: log.date, reverse=True)
    if not ordered:
        return None

    yesterday = today - timedelta(days=1)
    leading = ordered[0].date in (today, yesterday)

    current = 0
    best = 0
    run = 0
    previous_day = None

    for log in ordered:
        if log.date == previous_day:
            # doublon pour le même jour, le premier gagne
            continue
        if previous_day is not None and (previous_day - log.date).days > 1:
            run = 0
            leading = False
        previous_day = log.date

        if log.status == "completed":
            run += 1
            if leading:
                current = run
            best = max(best, run)
        elif log.status == "missed":
            run = 0
            leading = False

    return StreakResult(current_streak=current, best_streak=max(best, current))


def update_habit_streaks(store: HabitStore, user_id: int, today: date = None) -> int:
    """
    Recalcule les streaks de toutes les habitudes actives de l'utilisateur.

    Best-effort : une erreur de stockage interrompt la boucle, les habitudes
    déjà mises à jour gardent leurs nouvelles valeurs.
    Retourne le nombre d'habitudes mises à jour.
    """
    if today is None:
        today = get_today()

    updated = 0
    try:
        for habit in store.list_active_habits(user_id):
            logs = store.list_logs(habit.id, settings.STREAK_LOOKBACK)
            result = compute_streaks(logs, today)
            if result is None:
                continue

            store.update_habit_aggregates(habit.id, result.current_streak, result.best_streak)
            updated += 1
    except StorageError:
        logger.exception(f"Error updating habit streaks for user {user_id}")

    return updated


def check_and_create_missed_logs(store: HabitStore, user_id: int, today: date = None) -> int:
    """
    Insère un log `missed` pour hier sur chaque habitude quotidienne active
    qui n'en a pas, puis relance le calcul des streaks.

    Idempotent : un second appel le même jour ne réécrit rien.
    Les habitudes créées après hier ne sont pas concernées.
    Retourne le nombre de logs insérés.
    """
    if today is None:
        today = get_today()
    yesterday = today - timedelta(days=1)

    inserted = 0
    try:
        for habit in store.list_active_daily_habits(user_id):
            if habit.created_at is not None and to_local_date(habit.created_at) > yesterday:
                continue

            if store.find_log(habit.id, yesterday) is not None:
                continue

            store.insert_log(HabitLog(
                habit_id=habit.id,
                user_id=user_id,
                date=yesterday,
                status="missed",
                completed_at=None
            ))
            inserted += 1
    except StorageError:
        logger.exception(f"Error checking missed logs for user {user_id}")

    if inserted:
        logger.info(f"Backfilled {inserted} missed log(s) for user {user_id} on {yesterday.isoformat()}")

    update_habit_streaks(store, user_id, today)
    return inserted


def run_backfill_and_recompute(store: HabitStore, user_id: int, today: date = None) -> int:
    """Backfill d'hier puis recalcul complet des streaks."""
    return check_and_create_missed_logs(store, user_id, today)
