"""
Social App URL Configuration
"""
from django.urls import path
from .views import (
    RegisterView,
    LoginView,
    LogoutView,
    WhoAmIView,
    UserDetailView,
    UserByUsernameView,
    MeView,
    FollowView,
    FollowersView,
    FollowingView,
    FollowStatusView,
    PostListView,
    PostDetailView,
    UserPostsView,
    PostLikeView,
    PostLikesView,
    LikeStatusView,
    PostCommentsView,
    CommentDetailView,
    CommentReplyView,
    CommentRepliesView,
    UserCommentsView,
    UploadView,
)

urlpatterns = [
    # Auth
    path('auth/register/', RegisterView.as_view(), name='register'),
    path('auth/login/', LoginView.as_view(), name='login'),
    path('auth/logout/', LogoutView.as_view(), name='logout'),
    path('auth/whoami/', WhoAmIView.as_view(), name='whoami'),

    # Users
    path('users/me/', MeView.as_view(), name='user-me'),
    path('users/by-username/<str:username>/', UserByUsernameView.as_view(), name='user-by-username'),
    path('users/<uuid:user_id>/', UserDetailView.as_view(), name='user-detail'),
    path('users/<uuid:user_id>/posts/', UserPostsView.as_view(), name='user-posts'),
    path('users/<uuid:user_id>/comments/', UserCommentsView.as_view(), name='user-comments'),

    # Follows
    path('users/<uuid:user_id>/follow/', FollowView.as_view(), name='follow'),
    path('users/<uuid:user_id>/followers/', FollowersView.as_view(), name='followers'),
    path('users/<uuid:user_id>/following/', FollowingView.as_view(), name='following'),
    path('users/<uuid:user_id>/follow-status/', FollowStatusView.as_view(), name='follow-status'),

    # Posts
    path('posts/', PostListView.as_view(), name='post-list'),
    path('posts/<uuid:post_id>/', PostDetailView.as_view(), name='post-detail'),

    # Likes
    path('posts/<uuid:post_id>/like/', PostLikeView.as_view(), name='post-like'),
    path('posts/<uuid:post_id>/likes/', PostLikesView.as_view(), name='post-likes'),
    path('posts/<uuid:post_id>/like-status/', LikeStatusView.as_view(), name='like-status'),

    # Comments
    path('posts/<uuid:post_id>/comments/', PostCommentsView.as_view(), name='post-comments'),
    path('comments/<uuid:comment_id>/', CommentDetailView.as_view(), name='comment-detail'),
    path('comments/<uuid:comment_id>/reply/', CommentReplyView.as_view(), name='comment-reply'),
    path('comments/<uuid:comment_id>/replies/', CommentRepliesView.as_view(), name='comment-replies'),

    # Uploads
    path('uploads/', UploadView.as_view(), name='upload'),
]
