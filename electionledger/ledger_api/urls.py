from django.urls import path
from . import views

# This file maps URL endpoints to the View classes in views.py

urlpatterns = [
    # --- Voting Endpoints (gateway) ---
    # e.g., POST /api/v1/vote/cast
    path('vote/cast', views.CastVoteView.as_view(), name='cast-vote'),
    path('vote/remove', views.RemoveVoteView.as_view(), name='remove-vote'),

    # --- Admin Endpoints (gateway) ---
    path('admin/candidates', views.AddCandidateView.as_view(), name='admin-add-candidate'),
    path('admin/candidates/<int:candidate_id>/deactivate', views.DeactivateCandidateView.as_view(),
         name='admin-deactivate-candidate'),
    path('admin/voters/authorize', views.AuthorizeVotersView.as_view(), name='admin-authorize-voters'),
    path('admin/duration', views.ElectionDurationView.as_view(), name='admin-election-duration'),
    path('admin/transfer', views.TransferAdminView.as_view(), name='admin-transfer'),
    path('admin/end', views.EndElectionView.as_view(), name='admin-end-election'),

    # Anyone may ask the ledger to close an expired election
    path('election/check-end', views.CheckElectionEndView.as_view(), name='check-election-end'),

    # --- Public Dashboard Endpoints ---
    # e.g., GET /api/v1/candidates
    path('candidates', views.CandidateListView.as_view(), name='candidate-list'),
    path('candidates/<int:candidate_id>', views.CandidateDetailView.as_view(), name='candidate-detail'),
    path('election', views.ElectionStatsView.as_view(), name='election-stats'),
    path('winners', views.WinnersView.as_view(), name='winners'),
    path('vote/status/<str:voter>', views.VoterStatusView.as_view(), name='voter-status'),
    path('ledger', views.PublicLedgerView.as_view(), name='public-ledger'),
]
