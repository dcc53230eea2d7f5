from datetime import timedelta

import pytest
from sqlalchemy import func
from sqlmodel import select

from blogapi import errors, models, repositories
from blogapi.security import decode_token
from blogapi.services import AuthService, CommentService, PostService, ensure_owner


def _user(session, settings, email='alex@test.com'):
    auth = AuthService(session, settings)
    token = auth.signup('Alex', 'Bob', email, 'pw123')
    return auth.verify_token(token)


def _comment_count(session, post_id):
    stmt = select(func.count()).select_from(models.Comment).where(models.Comment.post_id == post_id)
    return session.exec(stmt).one()


def test_signup_then_login(session, settings):
    auth = AuthService(session, settings)
    t1 = auth.signup('Alex', 'Bob', 'alex@test.com', 'pw123')
    t2 = auth.login('alex@test.com', 'pw123')
    assert auth.verify_token(t1).id == auth.verify_token(t2).id
    user = repositories.UserRepository(session).get_by_email('alex@test.com')
    assert user.password_hash != 'pw123'
    assert len(user.password_hash) == 128


def test_signup_duplicate_email_writes_nothing(session, settings):
    auth = AuthService(session, settings)
    auth.signup('Alex', '', 'alex@test.com', 'pw123')
    with pytest.raises(errors.UserAlreadyExists):
        auth.signup('Other', 'Person', 'alex@test.com', 'different')
    assert len(session.exec(select(models.User)).all()) == 1


def test_signup_race_on_unique_email(session, settings, monkeypatch):
    # the existence check passes for both signups; the unique index decides
    monkeypatch.setattr(repositories.UserRepository, 'exists_by_email', lambda self, email: False)
    auth = AuthService(session, settings)
    auth.signup('Alex', 'Bob', 'alex@test.com', 'pw123')
    with pytest.raises(errors.UserAlreadyExists):
        auth.signup('Other', 'Person', 'alex@test.com', 'different')
    # the session was rolled back and is usable again
    token = auth.login('alex@test.com', 'pw123')
    assert auth.verify_token(token).first_name == 'Alex'
    assert len(session.exec(select(models.User)).all()) == 1


def test_login_failures(session, settings):
    auth = AuthService(session, settings)
    auth.signup('Alex', 'Bob', 'alex@test.com', 'pw123')
    with pytest.raises(errors.PasswordMismatch):
        auth.login('alex@test.com', 'wrong')
    with pytest.raises(errors.UserNotFound):
        auth.login('nobody@test.com', 'pw123')


def test_verify_token_after_user_deleted(session, settings):
    auth = AuthService(session, settings)
    token = auth.signup('Alex', 'Bob', 'alex@test.com', 'pw123')
    user_id = decode_token(token, settings)
    session.delete(auth.resolve(user_id))
    session.commit()
    with pytest.raises(errors.UserNotFound):
        auth.verify_token(token)


def test_verify_token_rejects_garbage(session, settings):
    with pytest.raises(errors.TokenInvalid):
        AuthService(session, settings).verify_token('garbage')


def test_ensure_owner_checks_existence_first():
    with pytest.raises(errors.PostNotFound):
        ensure_owner(None, 1, errors.PostNotFound)
    post = models.Post(id=1, user_id=1, title='T', content='C')
    with pytest.raises(errors.PermissionDenied):
        ensure_owner(post, 2, errors.PostNotFound)
    assert ensure_owner(post, 1, errors.PostNotFound) is post


def test_post_ownership(session, settings):
    alex = _user(session, settings, 'alex@test.com')
    sam = _user(session, settings, 'sam@test.com')
    posts = PostService(session)
    post_id = posts.create_post(alex.id, 'T', 'C').id
    with pytest.raises(errors.PermissionDenied):
        posts.update_post(sam.id, post_id, 'T2', 'C2')
    with pytest.raises(errors.PermissionDenied):
        posts.delete_post(sam.id, post_id)
    updated = posts.update_post(alex.id, post_id, 'T2', 'C2')
    assert (updated.title, updated.content) == ('T2', 'C2')
    posts.delete_post(alex.id, post_id)
    # gone: not-found wins over permission for every actor
    for actor in (alex.id, sam.id):
        with pytest.raises(errors.PostNotFound):
            posts.update_post(actor, post_id, 'x', 'y')
        with pytest.raises(errors.PostNotFound):
            posts.delete_post(actor, post_id)


def _naive(value):
    return value.replace(tzinfo=None)


def test_updates_bump_updated_at(session, settings):
    alex = _user(session, settings)
    posts, comments = PostService(session), CommentService(session)
    post = posts.create_post(alex.id, 'T', 'C')
    comment = comments.create_comment(alex.id, post.id, 'first')
    hour_ago = _naive(post.created_at) - timedelta(hours=1)
    post.updated_at = comment.updated_at = hour_ago
    session.add_all([post, comment])
    session.commit()

    updated = posts.update_post(alex.id, post.id, 'T2', 'C2')
    assert _naive(updated.updated_at) > hour_ago
    assert _naive(updated.created_at) > hour_ago
    edited = comments.update_comment(alex.id, comment.id, 'edited')
    assert _naive(edited.updated_at) > hour_ago


def test_deleting_post_deletes_its_comments(session, settings):
    alex = _user(session, settings, 'alex@test.com')
    sam = _user(session, settings, 'sam@test.com')
    post_id = PostService(session).create_post(alex.id, 'T', 'C').id
    comments = CommentService(session)
    comments.create_comment(sam.id, post_id, 'first')
    comments.create_comment(alex.id, post_id, 'second')
    assert _comment_count(session, post_id) == 2
    PostService(session).delete_post(alex.id, post_id)
    assert _comment_count(session, post_id) == 0


def test_comment_rules(session, settings):
    alex = _user(session, settings, 'alex@test.com')
    sam = _user(session, settings, 'sam@test.com')
    comments = CommentService(session)
    with pytest.raises(errors.PostNotFound):
        comments.create_comment(alex.id, 99999, 'hello')
    with pytest.raises(errors.PostNotFound):
        comments.list_comments(99999)
    post = PostService(session).create_post(alex.id, 'T', 'C')
    comment_id = comments.create_comment(sam.id, post.id, 'nice').id
    with pytest.raises(errors.PermissionDenied):
        comments.update_comment(alex.id, comment_id, 'edited')
    assert comments.update_comment(sam.id, comment_id, 'edited').comment == 'edited'
    comments.delete_comment(sam.id, comment_id)
    with pytest.raises(errors.CommentNotFound):
        comments.delete_comment(alex.id, comment_id)


def test_post_pages_are_disjoint_and_newest_first(session, settings):
    alex = _user(session, settings)
    posts = PostService(session, page_size=10)
    created = [posts.create_post(alex.id, f'title {i}', 'body').id for i in range(15)]
    first = [p.id for p in posts.list_posts(skip=0)]
    second = [p.id for p in posts.list_posts(skip=10)]
    assert len(first) == 10 and len(second) == 5
    assert not set(first) & set(second)
    assert first + second == list(reversed(created))
