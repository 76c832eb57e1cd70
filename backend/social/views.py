"""
DRF Views
=========

Thin HTTP layer over social.services. Views:
1. Validate input with serializers
2. Call exactly one service function with request.user as the actor
3. Serialize the result

Domain errors (NotFound, Conflict, Forbidden, BadRequest) are raised by
the services and rendered by social.exceptions.custom_exception_handler,
so there is no try/except around service calls here.
"""

from django.contrib.auth import authenticate, login, logout
from rest_framework import permissions, status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import NotFound
from .pagination import DEFAULT_LIMIT, DEFAULT_REPLY_LIMIT
from .serializers import (
    CommentDetailSerializer,
    CommentSerializer,
    CommentWithRepliesSerializer,
    CommentWriteSerializer,
    LikeSerializer,
    LoginSerializer,
    PaginationQuerySerializer,
    PostSerializer,
    PostWriteSerializer,
    RegisterSerializer,
    UploadSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from .services import comments, follows, likes, posts, users
from .uploads import save_upload


def get_page_params(request, default_limit=DEFAULT_LIMIT):
    """Parse ?page=&limit= (400 on garbage, limit capped at MAX_LIMIT)."""
    serializer = PaginationQuerySerializer(
        data=request.query_params,
        context={'default_limit': default_limit}
    )
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data['page'], serializer.validated_data['limit']


def paged_response(page, serializer_class):
    return Response({
        **page,
        'items': serializer_class(page['items'], many=True).data,
    })


# ============================================================================
# AUTH
# ============================================================================

class RegisterView(APIView):
    """
    POST /api/auth/register/

    Body: { "email", "username", "password", "first_name"?, "last_name"?, "bio"? }
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = users.create(serializer.validated_data)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/auth/login/

    Session login with email + password.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            account = users.find_by_email(serializer.validated_data['email'])
        except NotFound:
            raise AuthenticationFailed('Invalid credentials')

        user = authenticate(
            request,
            username=account.username,
            password=serializer.validated_data['password']
        )
        if user is None:
            raise AuthenticationFailed('Invalid credentials')

        login(request, user)
        return Response(UserSerializer(user).data)


class LogoutView(APIView):
    """POST /api/auth/logout/"""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class WhoAmIView(APIView):
    """
    GET /api/auth/whoami/

    Returns current authenticated user info.
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        if request.user.is_authenticated:
            return Response({
                'authenticated': True,
                'user': UserSerializer(users.find_by_id(request.user.id)).data
            })
        return Response({
            'authenticated': False,
            'user': None
        })


# ============================================================================
# USERS
# ============================================================================

class UserDetailView(APIView):
    """GET /api/users/<id>/"""
    permission_classes = [permissions.AllowAny]

    def get(self, request, user_id):
        return Response(UserSerializer(users.find_by_id(user_id)).data)


class UserByUsernameView(APIView):
    """GET /api/users/by-username/<username>/"""
    permission_classes = [permissions.AllowAny]

    def get(self, request, username):
        return Response(UserSerializer(users.find_by_username(username)).data)


class MeView(APIView):
    """
    GET    /api/users/me/  - own profile
    PATCH  /api/users/me/  - partial profile update
    DELETE /api/users/me/  - delete account
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(users.find_by_id(request.user.id)).data)

    def patch(self, request):
        serializer = UserUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        user = users.update(request.user.id, serializer.validated_data)
        return Response(UserSerializer(user).data)

    def delete(self, request):
        user_id = request.user.id
        logout(request)
        users.remove(user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ============================================================================
# FOLLOWS
# ============================================================================

class FollowView(APIView):
    """
    POST   /api/users/<id>/follow/  - follow
    DELETE /api/users/<id>/follow/  - unfollow
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, user_id):
        follows.follow_user(user_id, request.user)
        return Response(
            {'message': 'User followed successfully'},
            status=status.HTTP_201_CREATED
        )

    def delete(self, request, user_id):
        follows.unfollow_user(user_id, request.user)
        return Response({'message': 'User unfollowed successfully'})


class FollowersView(APIView):
    """GET /api/users/<id>/followers/?page=&limit="""
    permission_classes = [permissions.AllowAny]

    def get(self, request, user_id):
        page, limit = get_page_params(request)
        return paged_response(follows.get_followers(user_id, page, limit), UserSerializer)


class FollowingView(APIView):
    """GET /api/users/<id>/following/?page=&limit="""
    permission_classes = [permissions.AllowAny]

    def get(self, request, user_id):
        page, limit = get_page_params(request)
        return paged_response(follows.get_following(user_id, page, limit), UserSerializer)


class FollowStatusView(APIView):
    """GET /api/users/<id>/follow-status/ - does the current user follow <id>?"""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, user_id):
        return Response({
            'following': follows.check_follow_status(request.user.id, user_id)
        })


# ============================================================================
# POSTS
# ============================================================================

class PostListView(APIView):
    """
    GET  /api/posts/?page=&limit=  - all posts, newest first
    POST /api/posts/               - create (author = request.user)
    """

    def get(self, request):
        page, limit = get_page_params(request)
        return paged_response(posts.find_all(page, limit), PostSerializer)

    def post(self, request):
        serializer = PostWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        post = posts.create(serializer.validated_data, request.user)
        return Response(PostSerializer(post).data, status=status.HTTP_201_CREATED)


class PostDetailView(APIView):
    """
    GET    /api/posts/<id>/
    PATCH  /api/posts/<id>/  - author only
    DELETE /api/posts/<id>/  - author only
    """

    def get(self, request, post_id):
        return Response(PostSerializer(posts.find_one(post_id)).data)

    def patch(self, request, post_id):
        serializer = PostWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        post = posts.update(post_id, serializer.validated_data, request.user)
        return Response(PostSerializer(post).data)

    def delete(self, request, post_id):
        posts.remove(post_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class UserPostsView(APIView):
    """GET /api/users/<id>/posts/?page=&limit="""
    permission_classes = [permissions.AllowAny]

    def get(self, request, user_id):
        author = users.find_by_id(user_id)
        page, limit = get_page_params(request)
        return paged_response(posts.find_by_author(author.id, page, limit), PostSerializer)


# ============================================================================
# LIKES
# ============================================================================

class PostLikeView(APIView):
    """
    POST   /api/posts/<id>/like/  - like
    DELETE /api/posts/<id>/like/  - unlike
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, post_id):
        likes.like_post(post_id, request.user)
        return Response(
            {'message': 'Post liked successfully'},
            status=status.HTTP_201_CREATED
        )

    def delete(self, request, post_id):
        likes.unlike_post(post_id, request.user)
        return Response({'message': 'Post unliked successfully'})


class PostLikesView(APIView):
    """GET /api/posts/<id>/likes/?page=&limit="""
    permission_classes = [permissions.AllowAny]

    def get(self, request, post_id):
        page, limit = get_page_params(request)
        return paged_response(likes.get_post_likes(post_id, page, limit), LikeSerializer)


class LikeStatusView(APIView):
    """GET /api/posts/<id>/like-status/ - has the current user liked it?"""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, post_id):
        return Response({
            'liked': likes.check_user_like(post_id, request.user.id)
        })


# ============================================================================
# COMMENTS
# ============================================================================

class PostCommentsView(APIView):
    """
    GET  /api/posts/<id>/comments/?page=&limit=  - top-level comments + replies
    POST /api/posts/<id>/comments/               - new top-level comment

    Queries for GET: COUNT + page + one query for all replies on the page.
    """

    def get(self, request, post_id):
        page, limit = get_page_params(request)
        return paged_response(
            comments.find_by_post(post_id, page, limit),
            CommentWithRepliesSerializer
        )

    def post(self, request, post_id):
        serializer = CommentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = comments.create(post_id, serializer.validated_data['content'], request.user)
        return Response(
            CommentDetailSerializer(comments.find_one(comment.id)).data,
            status=status.HTTP_201_CREATED
        )


class CommentDetailView(APIView):
    """
    GET    /api/comments/<id>/
    PATCH  /api/comments/<id>/  - author only
    DELETE /api/comments/<id>/  - author only, replies are kept
    """

    def get(self, request, comment_id):
        return Response(CommentDetailSerializer(comments.find_one(comment_id)).data)

    def patch(self, request, comment_id):
        serializer = CommentWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        comment = comments.update(comment_id, serializer.validated_data, request.user)
        return Response(CommentDetailSerializer(comment).data)

    def delete(self, request, comment_id):
        comments.remove(comment_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CommentReplyView(APIView):
    """POST /api/comments/<id>/reply/"""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, comment_id):
        serializer = CommentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reply = comments.create_reply(comment_id, serializer.validated_data['content'], request.user)
        return Response(
            CommentDetailSerializer(comments.find_one(reply.id)).data,
            status=status.HTTP_201_CREATED
        )


class CommentRepliesView(APIView):
    """GET /api/comments/<id>/replies/?page=&limit= (default limit 5, oldest first)"""
    permission_classes = [permissions.AllowAny]

    def get(self, request, comment_id):
        page, limit = get_page_params(request, default_limit=DEFAULT_REPLY_LIMIT)
        return paged_response(comments.get_replies(comment_id, page, limit), CommentSerializer)


class UserCommentsView(APIView):
    """GET /api/users/<id>/comments/?page=&limit="""
    permission_classes = [permissions.AllowAny]

    def get(self, request, user_id):
        author = users.find_by_id(user_id)
        page, limit = get_page_params(request)
        return paged_response(comments.find_by_author(author.id, page, limit), CommentSerializer)


# ============================================================================
# UPLOADS
# ============================================================================

class UploadView(APIView):
    """
    POST /api/uploads/  (multipart, field "file")

    Returns { "filename", "url" }. Pass `filename` as `image` when
    creating or updating a post.
    """
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = UploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return Response(
            save_upload(serializer.validated_data['file']),
            status=status.HTTP_201_CREATED
        )
