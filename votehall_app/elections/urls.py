from django.urls import path

from elections import views_auth, views_elections, views_health

urlpatterns = [
    path("healthz", views_health.healthz, name="healthz"),
    path("readyz", views_health.readyz, name="readyz"),

    path("auth/csrf", views_auth.csrf, name="auth-csrf"),
    path("auth/register", views_auth.register, name="auth-register"),
    path("auth/login", views_auth.login_view, name="auth-login"),
    path("auth/logout", views_auth.logout_view, name="auth-logout"),
    path("auth/me", views_auth.me, name="auth-me"),

    path("elections/", views_elections.election_list, name="election-list"),
    path("elections/summary", views_elections.election_summary, name="election-summary"),
    path("elections/<int:election_id>/", views_elections.election_detail, name="election-detail"),
    path("elections/<int:election_id>/status", views_elections.election_transition, name="election-transition"),
    path("elections/<int:election_id>/apply", views_elections.election_apply, name="election-apply"),
    path("elections/<int:election_id>/vote", views_elections.election_vote, name="election-vote"),
    path("elections/<int:election_id>/has-voted", views_elections.election_has_voted, name="election-has-voted"),
    path("elections/<int:election_id>/results", views_elections.election_results, name="election-results"),
    path("me/applications", views_elections.my_applications, name="my-applications"),
]
