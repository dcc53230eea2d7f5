import pytest
from sqlmodel import Session

from blogapi import models
from blogapi.security import decode_token, issue_token

POSTS = '/api/posts/get-posts'


def test_missing_header(client):
    r = client.get(POSTS)
    assert r.status_code == 401
    assert r.json() == {'error': 'authHeader-invalid'}


@pytest.mark.parametrize('header', [
    'Token abc',
    'Bearer',
    'Bearer    ',
    'bearer abc',
    'Bearer not.a.jwt',
])
def test_malformed_header_or_token(client, header):
    r = client.get(POSTS, headers={'Authorization': header})
    assert r.status_code == 401
    assert r.json() == {'error': 'jwt-invalid'}


def test_valid_token_passes(client, signup):
    r = client.get(POSTS, headers=signup('alex@test.com'))
    assert r.status_code == 200
    assert r.json() == {'posts': []}


def test_token_for_unknown_user_is_rejected_like_a_bad_token(client, settings):
    token = issue_token(12345, settings)
    r = client.get(POSTS, headers={'Authorization': f'Bearer {token}'})
    assert r.status_code == 401
    assert r.json() == {'error': 'jwt-invalid'}


def test_token_stops_working_when_user_is_deleted(client, signup, settings):
    headers = signup('alex@test.com')
    user_id = decode_token(headers['Authorization'].split(' ', 1)[1], settings)
    with Session(client.app.state.engine) as db:
        db.delete(db.get(models.User, user_id))
        db.commit()
    r = client.get(POSTS, headers=headers)
    assert r.status_code == 401
    assert r.json() == {'error': 'jwt-invalid'}


def test_gate_runs_before_input_validation(client):
    r = client.post('/api/comments/create-comment', json={'postId': 'nope'})
    assert r.status_code == 401
    assert r.json() == {'error': 'authHeader-invalid'}
