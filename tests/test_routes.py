"""
End-to-end request tests: login, role-gated admin views and cache
invalidation as seen through the HTTP surface.
"""

import pytest
import requests

from newsdesk.modules.auth import SessionStatus

from fakes import ADMIN_LOGIN, EDITOR_LOGIN, FakeResponse, article, category


def sign_in(client, transport, login=EDITOR_LOGIN):
    transport.add('POST', '/auth/login', json=login)
    response = client.post('/login', json={'email': login['email'], 'password': 'secret1'})
    assert response.status_code == 200, response.get_json()
    return response


def _json(data, status=200):
    return FakeResponse(status, data)


@pytest.fixture
def editor(client, transport):
    sign_in(client, transport, EDITOR_LOGIN)
    return client


@pytest.fixture
def admin(client, transport):
    sign_in(client, transport, ADMIN_LOGIN)
    return client


# ===== Login / logout =====

def test_login_requires_both_fields(client, transport):
    response = client.post('/login', json={'email': 'a@b.com'})

    assert response.status_code == 400
    assert transport.calls == []


def test_wrong_password_keeps_user_anonymous(client, transport, newsdesk):
    transport.add('POST', '/auth/login', status=401, json={'message': 'Invalid credentials'})

    response = client.post('/login', json={'email': 'A@B.com', 'password': 'nope'})

    assert response.status_code == 401
    body = response.get_json()
    assert body['form'] == {'email': 'a@b.com'}, "Submitted email is handed back"
    assert newsdesk.session.status == SessionStatus.ANONYMOUS
    assert newsdesk.store.load() is None


def test_login_redirects_to_requested_page(client, transport):
    transport.add('POST', '/auth/login', json=EDITOR_LOGIN)

    response = client.post('/login?next=/admin/articles/',
                           json={'email': 'a@b.com', 'password': 'secret1'})

    body = response.get_json()
    assert body['success'] is True
    assert body['redirect'] == '/admin/articles/'
    assert body['session']['user']['role'] == 'editor'
    assert 'token' not in body['session']


def test_login_ignores_offsite_next(client, transport):
    transport.add('POST', '/auth/login', json=EDITOR_LOGIN)

    response = client.post('/login?next=//evil.example.com/',
                           json={'email': 'a@b.com', 'password': 'secret1'})

    assert response.get_json()['redirect'] == '/admin/'


def test_unreachable_server_is_a_bad_gateway(client, transport):
    transport.add('POST', '/auth/login', error=requests.ConnectionError('refused'))

    response = client.post('/login', json={'email': 'a@b.com', 'password': 'secret1'})

    assert response.status_code == 502


def test_logout_twice(editor, newsdesk):
    assert editor.post('/logout').status_code == 200
    assert editor.post('/logout').status_code == 200
    assert newsdesk.session.status == SessionStatus.ANONYMOUS
    assert newsdesk.store.load() is None


def test_me_reports_session(editor):
    data = editor.get('/me').get_json()

    assert data['is_authenticated'] is True
    assert data['is_editor'] is True
    assert data['is_admin'] is False


# ===== Register =====

def test_register_checks_password_locally(client, transport):
    response = client.post('/register', json={'name': 'Ana', 'email': 'a@b.com', 'password': '123'})

    assert response.status_code == 400
    assert transport.calls == []


def test_register_shows_server_rejection(client, transport):
    transport.add('POST', '/auth/register', status=400, json={'message': 'Email already registered'})

    response = client.post('/register', json={
        'name': 'Ana', 'email': 'a@b.com', 'password': 'secret1', 'confirm_password': 'secret1',
    })

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Email already registered'


def test_register_success_points_to_login(client, transport, newsdesk):
    transport.add('POST', '/auth/register', status=201, json={'message': 'created'})

    response = client.post('/register', json={'name': 'Ana', 'email': 'a@b.com', 'password': 'secret1'})

    assert response.get_json()['redirect'] == '/login'
    assert newsdesk.session.status == SessionStatus.ANONYMOUS


# ===== Role gating =====

def test_editor_can_manage_articles(editor, transport):
    transport.add('GET', '/articles', json=[article('1')])

    response = editor.get('/admin/articles/')

    assert response.status_code == 200
    assert response.get_json()['total'] == 1


def test_editor_is_denied_admin_areas(editor, transport):
    for path in ('/admin/', '/admin/categories/', '/admin/newsletter/'):
        response = editor.get(path)
        assert response.status_code == 302, f"{path} should bounce an editor"
        assert response.headers['Location'].endswith('/news/')


def test_admin_dashboard(admin, transport):
    transport.add('GET', '/articles', json=[article('1'), article('2')])
    transport.add('GET', '/categories/active', json=[category('c1')])
    transport.add('GET', '/newsletter-subscriptions/stats',
                  json={'total': 3, 'active': 3, 'inactive': 0, 'unsubscribed': 0})
    transport.add('GET', '/views', json=[{'articleId': '2', 'count': 10, 'likes': 1}])

    data = admin.get('/admin/').get_json()

    assert data['user']['role'] == 'admin'
    assert data['stats']['total_articles'] == 2
    assert data['stats']['newsletter']['active'] == 3
    assert data['top_articles']['most_viewed'][0]['id'] == '2'


def test_admin_login_alias_redirects(client):
    response = client.get('/admin/login')

    assert response.status_code == 302
    assert '/login' in response.headers['Location']


# ===== Cache behaviour through the views =====

def test_created_article_shows_up_in_list(editor, transport):
    listing = [article('1')]
    transport.add('GET', '/articles', handler=lambda call: _json(list(listing)))

    def create(call):
        listing.append(article('2', call.json['title']))
        return _json({'article': listing[-1]}, 201)

    transport.add('POST', '/articles', handler=create)

    assert editor.get('/admin/articles/').get_json()['total'] == 1
    assert editor.get('/admin/articles/').get_json()['total'] == 1
    assert transport.count('GET', '/articles') == 1, "Second read should be cached"

    response = editor.post('/admin/articles/', json={'title': 'Fresh', 'status': 'published'})
    assert response.status_code == 201

    assert editor.get('/admin/articles/').get_json()['total'] == 2
    assert transport.count('GET', '/articles') == 2


def test_failed_update_hands_form_back(editor, transport):
    transport.add('GET', '/articles', json=[article('1')])
    transport.add('PUT', '/articles/1', status=422, json={'message': 'Title too long'})
    editor.get('/admin/articles/')

    response = editor.put('/admin/articles/1', json={'title': 'x' * 500})

    assert response.status_code == 422
    body = response.get_json()
    assert body['message'] == 'Title too long'
    assert body['form'] == {'title': 'x' * 500}
    editor.get('/admin/articles/')
    assert transport.count('GET', '/articles') == 1, "Failed write must not invalidate"


def test_invalid_article_is_rejected_before_api(editor, transport):
    response = editor.post('/admin/articles/', json={'title': ''})

    assert response.status_code == 400
    assert transport.count('POST', '/articles') == 0


def test_rejected_token_mid_session_sends_user_to_login(editor, transport, newsdesk):
    transport.add('GET', '/articles', status=401, json={'message': 'jwt expired'})

    response = editor.get('/admin/articles/')
    assert response.status_code == 200
    assert response.get_json()['items'] == []
    assert newsdesk.session.status == SessionStatus.INVALID

    response = editor.get('/admin/articles/')
    assert response.status_code == 302
    assert '/login' in response.headers['Location']


# ===== Categories =====

def test_admin_creates_category(admin, transport):
    transport.add('POST', '/categories', status=201, json=category('c9', 'Science'))

    response = admin.post('/admin/categories/', json={'name': 'Science', 'description': 'Lab news'})

    assert response.status_code == 201
    assert transport.last('POST', '/categories').json == {
        'name': 'Science', 'description': 'Lab news', 'active': True,
    }


def test_category_conflict_is_reported(admin, transport):
    transport.add('POST', '/categories', status=409, json={'message': 'Category already exists'})

    response = admin.post('/admin/categories/', json={'name': 'Tech', 'description': 'x'})

    assert response.status_code == 409
    assert response.get_json()['form']['name'] == 'Tech'


# ===== Editors =====

def test_admin_registers_editor_and_list_refreshes(admin, transport):
    transport.add('GET', '/auth/editors', json=[])
    transport.add('POST', '/auth/register/editor', status=201, json={'message': 'created'})
    assert admin.get('/admin/editors/').get_json() == []

    response = admin.post('/admin/editors/', json={'name': 'Bo', 'email': 'BO@x.com', 'password': 'secret1'})

    assert response.status_code == 201
    assert transport.last('POST', '/auth/register/editor').json == {
        'name': 'Bo', 'email': 'bo@x.com', 'password': 'secret1', 'role': 'editor',
    }
    admin.get('/admin/editors/')
    assert transport.count('GET', '/auth/editors') == 2


# ===== Public pages =====

def test_public_list_shows_only_published(client, transport):
    transport.add('GET', '/articles', json=[
        article('1', 'Live'),
        article('2', 'Draft', status='draft'),
        article('3', 'Featured', isDetach=True),
    ])

    data = client.get('/news/').get_json()

    assert [a['id'] for a in data['items']] == ['1', '3']
    assert [a['id'] for a in data['featured']] == ['3']


def test_public_draft_is_not_found(client, transport):
    transport.add('GET', '/articles/2', json=article('2', status='draft'))

    assert client.get('/news/2').status_code == 404


def test_public_list_survives_api_outage(client, transport):
    transport.add('GET', '/articles', error=requests.ConnectionError('refused'))

    response = client.get('/news/')

    assert response.status_code == 200
    assert response.get_json()['items'] == []


# ===== Newsletter =====

def test_subscribe_rejects_invalid_email(client, transport):
    response = client.post('/api/newsletter/subscribe', json={'email': 'nope'})

    assert response.status_code == 400
    assert transport.count('POST', '/newsletter-subscriptions/subscribe') == 0


def test_subscribe(client, transport):
    transport.add('POST', '/newsletter-subscriptions/subscribe', status=201, json={'message': 'ok'})

    response = client.post('/api/newsletter/subscribe', json={'email': 'reader@example.com', 'name': 'R'})

    assert response.status_code == 201
    assert transport.last('POST', '/newsletter-subscriptions/subscribe').json == {
        'email': 'reader@example.com', 'name': 'R',
    }


def test_subscriber_table_is_admin_only(editor):
    assert editor.get('/admin/newsletter/stats').status_code == 302


def test_newsletter_edit_rejects_non_text_email(admin, transport):
    response = admin.put('/admin/newsletter/s1', json={'email': 42})

    assert response.status_code == 400
    assert transport.count('PUT', '/newsletter-subscriptions/s1') == 0


# ===== Wrongly typed bodies =====

@pytest.mark.parametrize('path, body', [
    ('/api/newsletter/subscribe', {'email': 5}),
    ('/api/newsletter/subscribe', ['reader@example.com']),
    ('/login', {'email': 'a@b.com', 'password': 123456}),
    ('/login', ['a@b.com', 'secret1']),
    ('/register', {'name': ['Ana'], 'email': 'a@b.com', 'password': 'secret1'}),
])
def test_public_forms_reject_wrongly_typed_bodies(client, transport, path, body):
    response = client.post(path, json=body)

    assert response.status_code == 400
    assert response.get_json()['success'] is False
    assert transport.calls == []


@pytest.mark.parametrize('path, body', [
    ('/admin/categories/', {'name': 5, 'description': 'x'}),
    ('/admin/categories/', ['x']),
    ('/admin/articles/', {'title': 7}),
    ('/admin/articles/', 'just a string'),
    ('/admin/editors/', {'name': 'Bo', 'email': 3, 'password': 'secret1'}),
])
def test_admin_forms_reject_wrongly_typed_bodies(admin, transport, path, body):
    calls = len(transport.calls)

    response = admin.post(path, json=body)

    assert response.status_code == 400
    assert response.get_json()['success'] is False
    assert len(transport.calls) == calls, "Nothing may reach the API"


# ===== Writes the server accepted but answered oddly =====

def test_created_article_with_unreadable_answer_still_refreshes_list(editor, transport):
    listing = [article('1')]
    transport.add('GET', '/articles', handler=lambda call: _json(list(listing)))

    def create(call):
        listing.append(article('2', call.json['title']))
        return _json({'ok': True}, 201)

    transport.add('POST', '/articles', handler=create)
    assert editor.get('/admin/articles/').get_json()['total'] == 1

    response = editor.post('/admin/articles/', json={'title': 'Fresh'})

    assert response.status_code == 502
    assert transport.count('POST', '/articles') == 1
    assert editor.get('/admin/articles/').get_json()['total'] == 2


def test_login_answer_without_token_is_a_bad_gateway(client, transport, newsdesk):
    transport.add('POST', '/auth/login', json={'name': 'Ana'})

    response = client.post('/login', json={'email': 'a@b.com', 'password': 'secret1'})

    assert response.status_code == 502
    assert newsdesk.session.status == SessionStatus.ANONYMOUS


# ===== Public search =====

def test_public_search_covers_title_summary_and_tags(client, transport):
    transport.add('GET', '/articles', json=[
        article('1', 'Election night', tags=['politics']),
        article('2', 'Cup final', tags=['sport'], summary='A night to remember'),
        article('3', 'Parliament draft', status='draft', tags=['politics']),
        article('4', 'Budget', tags=['Politics', 'economy']),
    ])

    def ids(query):
        return [a['id'] for a in client.get('/news/', query_string=query).get_json()['items']]

    assert ids({'search': 'politics'}) == ['1', '4']
    assert ids({'search': 'night'}) == ['1', '2']
    assert ids({'search': 'cup'}) == ['2']
    assert ids({'search': 'politics', 'category': 'sport'}) == []
    assert ids({}) == ['1', '2', '4']
