from logify.app.services.event_aggregator import EventAggregator
from logify.app.trackers.base import Observation, Tracker, TrackerDispatcher
from logify.app.trackers.comment_tracker import CommentTracker
from logify.app.trackers.core_tracker import CoreTracker
from logify.app.trackers.media_tracker import MediaTracker
from logify.app.trackers.option_tracker import OptionTracker
from logify.app.trackers.plugin_tracker import PluginTracker
from logify.app.trackers.post_tracker import PostTracker
from logify.app.trackers.term_tracker import TermTracker
from logify.app.trackers.theme_tracker import ThemeTracker
from logify.app.trackers.user_tracker import UserTracker
from logify.app.trackers.widget_tracker import WidgetTracker

TRACKER_CLASSES = (
    PostTracker,
    MediaTracker,
    UserTracker,
    OptionTracker,
    TermTracker,
    CommentTracker,
    PluginTracker,
    ThemeTracker,
    WidgetTracker,
    CoreTracker,
)


def default_trackers(aggregator: EventAggregator):
    return [tracker_class(aggregator) for tracker_class in TRACKER_CLASSES]


__all__ = [
    "Observation",
    "Tracker",
    "TrackerDispatcher",
    "default_trackers",
    "PostTracker",
    "MediaTracker",
    "UserTracker",
    "OptionTracker",
    "TermTracker",
    "CommentTracker",
    "PluginTracker",
    "ThemeTracker",
    "WidgetTracker",
    "CoreTracker",
]
