from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.mysql_config_repository import MySQLConfigRepository
from .access.service import AccessService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.scheduler import Scheduler, ThreadingScheduler
from .attendance.service import AttendanceService
from .core.constants import UNDO_WINDOW_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .people.mysql_person_repository import MySQLPersonRepository
from .people.service import RosterService
from .realtime.change_feed import ChangeFeed
from .settings.service import SettingsService
from .stats.service import StatsService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    feed: ChangeFeed

    meetings_repo: MySQLMeetingRepository
    people_repo: MySQLPersonRepository
    attendance_repo: MySQLAttendanceRepository
    config_repo: MySQLConfigRepository

    access_service: AccessService
    roster_service: RosterService
    attendance_service: AttendanceService
    stats_service: StatsService
    settings_service: SettingsService


def build_container(
    *,
    db_config: dict,
    undo_seconds: float = UNDO_WINDOW_SECONDS,
    scheduler: Optional[Scheduler] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    feed = ChangeFeed()

    meetings_repo = MySQLMeetingRepository(conn)
    people_repo = MySQLPersonRepository(conn, feed)
    attendance_repo = MySQLAttendanceRepository(conn, feed)
    config_repo = MySQLConfigRepository(conn)

    access_service = AccessService(config_repo)
    roster_service = RosterService(people_repo, attendance_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        meetings_repo,
        roster_service,
        feed=feed,
        scheduler=scheduler or ThreadingScheduler(),
        undo_seconds=undo_seconds,
    )
    stats_service = StatsService(attendance_repo, meetings_repo, people_repo)
    settings_service = SettingsService()

    return Container(
        conn=conn,
        feed=feed,
        meetings_repo=meetings_repo,
        people_repo=people_repo,
        attendance_repo=attendance_repo,
        config_repo=config_repo,
        access_service=access_service,
        roster_service=roster_service,
        attendance_service=attendance_service,
        stats_service=stats_service,
        settings_service=settings_service,
    )
