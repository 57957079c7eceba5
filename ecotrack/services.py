"""
Service wiring.

build_services() constructs one instance of every feature service over a
shared record store. The app keeps the bundle on app.state; routes receive
it through the get_services dependency.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from ecotrack.features.challenges.service import ChallengeService
from ecotrack.features.community.service import CommunityService
from ecotrack.features.export.service import ExportService
from ecotrack.features.footprint.service import FootprintService
from ecotrack.features.insights.service import InsightService
from ecotrack.features.leaderboard.service import LeaderboardService
from ecotrack.features.notifications.service import InMemoryNotificationSink
from ecotrack.features.profiles.service import ProfileService
from ecotrack.features.records.store import RecordStore, get_record_store


@dataclass
class AppServices:
    store: RecordStore
    notifications: InMemoryNotificationSink
    profiles: ProfileService
    footprints: FootprintService
    insights: InsightService
    leaderboard: LeaderboardService
    challenges: ChallengeService
    community: CommunityService
    exports: ExportService


def build_services(store: Optional[RecordStore] = None) -> AppServices:
    store = store if store is not None else get_record_store()
    notifications = InMemoryNotificationSink()
    profiles = ProfileService(store)
    footprints = FootprintService(store)
    insights = InsightService(store, footprints)
    return AppServices(
        store=store,
        notifications=notifications,
        profiles=profiles,
        footprints=footprints,
        insights=insights,
        leaderboard=LeaderboardService(footprints, profiles),
        challenges=ChallengeService(store, notifications),
        community=CommunityService(store),
        exports=ExportService(footprints, insights, profiles),
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services
