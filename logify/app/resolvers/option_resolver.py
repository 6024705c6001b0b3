from typing import Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.labels import key_to_label

OPTIONS = "options"

# Options that show up on a settings page, grouped by that page
SETTINGS_PAGES = {
    "options-general.php": (
        "blogname", "blogdescription", "siteurl", "home", "admin_email", "users_can_register",
        "default_role", "WPLANG", "timezone_string", "gmt_offset", "date_format", "time_format",
        "start_of_week",
    ),
    "options-writing.php": ("default_category", "default_post_format", "use_smilies"),
    "options-reading.php": (
        "show_on_front", "page_on_front", "page_for_posts", "posts_per_page", "posts_per_rss",
        "rss_use_excerpt", "blog_public",
    ),
    "options-discussion.php": (
        "default_pingback_flag", "default_ping_status", "default_comment_status",
        "require_name_email", "comment_registration", "close_comments_for_old_posts",
        "thread_comments", "page_comments", "comments_per_page", "comment_moderation",
        "comment_previously_approved", "show_avatars", "avatar_rating", "avatar_default",
    ),
    "options-media.php": (
        "thumbnail_size_w", "thumbnail_size_h", "thumbnail_crop", "medium_size_w",
        "medium_size_h", "large_size_w", "large_size_h", "uploads_use_yearmonth_folders",
    ),
    "options-permalink.php": ("permalink_structure", "category_base", "tag_base"),
    "options-privacy.php": ("wp_page_for_privacy_policy",),
}

OPTION_LABELS = {
    "blogname": "Site Title",
    "blogdescription": "Tagline",
    "siteurl": "WordPress Address (URL)",
    "home": "Site Address (URL)",
    "admin_email": "Administration Email Address",
    "users_can_register": "Membership",
    "default_role": "New User Default Role",
    "WPLANG": "Site Language",
    "timezone_string": "Timezone",
    "date_format": "Date Format",
    "time_format": "Time Format",
    "start_of_week": "Week Starts On",
    "posts_per_page": "Blog pages show at most",
    "blog_public": "Search engine visibility",
    "permalink_structure": "Permalink structure",
    "wp_page_for_privacy_policy": "Privacy Policy page",
}


def is_setting(option_name: str) -> bool:
    return any(option_name in names for names in SETTINGS_PAGES.values())


def settings_page(option_name: Optional[str]) -> str:
    for page, names in SETTINGS_PAGES.items():
        if option_name in names:
            return page
    return "options-general.php"


def option_label(option_name: str) -> str:
    return OPTION_LABELS.get(option_name) or key_to_label(option_name, ucwords=True)


class OptionResolver(ObjectResolver):
    """
    Options are stored by name. A reference without a key stands for the site
    settings as a whole, which always exist.
    """

    object_type = "option"
    key_field = "option_name"
    name_field = "option_name"

    def load(self, key: Key) -> Optional[Snapshot]:
        if key is None:
            return {"option_name": None}
        return self.catalog.get(self.object_type, key) or {"option_name": key}

    def name_of(self, snapshot: Snapshot) -> Optional[str]:
        option_name = snapshot.get("option_name")
        if option_name is None:
            return "Settings"
        return option_label(option_name)

    def fallback_name(self, key: Key) -> str:
        return option_label(str(key)) if key else "Settings"

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        return admin_url(settings_page(key))
