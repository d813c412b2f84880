from .post import Post, PostStatus
from .comment import Comment, CommentStatus
