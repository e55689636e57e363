# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment statistics.

Read-only summary counts over active assignments, computed on demand from
the store. Nothing is cached.
"""

import logging

from src.core.config.settings import SchedulerSettings
from src.domains.directory import TeacherDirectory
from src.domains.scheduling.schemas import (
    DayCount,
    StatisticsOverview,
    SubjectCount,
    TeacherCount,
)
from src.domains.scheduling.slots import Weekday
from src.domains.scheduling.store import store_transaction
from src.infrastructure.database.connection import Database

logger = logging.getLogger(__name__)

TOP_TEACHERS_LIMIT = 10


class StatisticsAggregator:
    """Computes the statistics overview.

    Attributes:
        database: School database.
        teachers: Teacher directory, used to name the busiest teachers.
        settings: Scheduler settings (store timeout).
    """

    def __init__(
        self,
        database: Database,
        teachers: TeacherDirectory,
        settings: SchedulerSettings,
    ) -> None:
        self.database = database
        self.teachers = teachers
        self.settings = settings

    async def overview(self) -> StatisticsOverview:
        """Summarize active assignments.

        Returns:
            Totals, per-subject and per-day histograms, and the ten teachers
            with the most assignments. Days are listed Monday to Sunday,
            including days with no assignments.
        """
        async with store_transaction(
            self.database, self.settings.store_timeout, "statistics_overview"
        ) as store:
            total = await store.count_active()
            teacher_total = await store.count_distinct_teachers()
            class_total = await store.count_distinct_classes()
            subjects = await store.subject_histogram()
            days = await store.day_histogram()
            busiest = await store.teacher_histogram(limit=TOP_TEACHERS_LIMIT)

            top_teachers = []
            for teacher_id, count in busiest:
                teacher = await self.teachers.get_teacher(store.session, teacher_id)
                top_teachers.append(
                    TeacherCount(
                        teacher_id=teacher_id,
                        teacher_name=teacher.name if teacher else None,
                        count=count,
                    )
                )

        logger.debug(
            "Computed statistics overview: assignments=%s, teachers=%s, classes=%s",
            total,
            teacher_total,
            class_total,
        )
        return StatisticsOverview(
            total_assignments=total,
            total_teachers=teacher_total,
            total_classes=class_total,
            by_subject=[SubjectCount(subject=s, count=c) for s, c in subjects],
            by_day=[DayCount(day=day.label, count=days.get(day, 0)) for day in Weekday],
            top_teachers=top_teachers,
        )
