"""Calcul du pourcentage de progression du jour"""

from typing import Iterable, Mapping


def compute_progress_from_counts(
    habit_count: int,
    completed_habits: int,
    task_count: int,
    completed_tasks: int
) -> int:
    """
    round((completed_habits + completed_tasks) / total * 100), arrondi au demi supérieur.
    total == 0 → 0
    """
    total = habit_count + task_count
    if total == 0:
        return 0

    completed = completed_habits + completed_tasks
    # arrondi half-up en arithmétique entière
    return (200 * completed + total) // (2 * total)


def compute_progress(
    active_habits: Iterable,
    today_logs_by_habit: Mapping[int, object],
    all_tasks: Iterable
) -> int:
    """Progression du jour : habitudes actives + toutes les tâches (quel que soit le due_date)."""
    habits = list(active_habits)
    tasks = list(all_tasks)

    completed_habits = 0
    for habit in habits:
        log = today_logs_by_habit.get(habit.id)
        if log is not None and log.status == "completed":
            completed_habits += 1

    completed_tasks = sum(1 for task in tasks if task.status == "completed")

    return compute_progress_from_counts(len(habits), completed_habits, len(tasks), completed_tasks)


def get_motivational_message(progress: int) -> str:
    if progress == 0:
        return "Let's start your day strong!"
    elif progress < 25:
        return "You've got this! Keep going!"
    elif progress < 50:
        return "Great progress! You're on a roll!"
    elif progress < 75:
        return "Fantastic! Almost there!"
    elif progress < 100:
        return "So close! Finish strong!"
    else:
        return "Amazing! You crushed it today!"
