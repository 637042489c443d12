"""Path table for the admin API, relative to the configured base URL."""

# Auth
ADMIN_LOGIN = "/admin/login"

# Users
USERS = "/users"
USERS_PROFILE = "/users/profile"
USERS_REGISTER = "/users/register"

# Jobs
JOBS = "/spajobs"
JOBS_STATS = "/spajobs/stats"

# Spas (list and item paths differ on the backend)
SPAS_LIST = "/spas/spaall/"
SPAS_CREATE = "/spas/spa"

# Applications
APPLICATIONS_LIST = "/application/admin/applications"

# Messages
MESSAGES = "/messages"

# Subscribers (the backend spells it "suscribers")
SUBSCRIBERS = "/suscribers"
SEND_JOBS_EMAIL = "/send-jobs-email"

# Categories
CATEGORIES = "/enums"

# Stats
STATS_DASHBOARD = "/stats"
STATS_SITE = "/site/stats"
STATS_DAILY_VISITS = "/site/visits/daily"
RECENT_ACTIVITY = "/activity/recent"

# Monthly chart series
CHART_USERS = "/users/chart/monthly"
CHART_JOBS = "/spajobs/chart/monthly"
CHART_MESSAGES = "/messages/chart/monthly"


def user(user_id: str) -> str:
    return f"{USERS}/{user_id}"


def job(job_id: str) -> str:
    return f"{JOBS}/{job_id}"


def spa(spa_id: str) -> str:
    return f"{SPAS_CREATE}/{spa_id}"


def application(application_id: str) -> str:
    return f"/application/{application_id}"


def application_status(application_id: str) -> str:
    return f"/application/admin/applications/status/{application_id}"


def application_delete(application_id: str) -> str:
    return f"/application/user/applications/{application_id}"


def message(message_id: str) -> str:
    return f"{MESSAGES}/{message_id}"


def message_reply(message_id: str) -> str:
    return f"{MESSAGES}/{message_id}/reply"


def subscriber(subscriber_id: str) -> str:
    return f"{SUBSCRIBERS}/{subscriber_id}"
