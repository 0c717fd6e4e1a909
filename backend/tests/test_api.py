from decimal import Decimal


def _add_student(client, name="Ada", email="ada@example.com", phone="555-0100"):
    r = client.post('/students', json={'name': name, 'email': email, 'phone': phone})
    assert r.status_code == 201
    return r.json()


def test_health_and_request_id(client):
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}
    assert 'X-Request-ID' in r.headers
    r2 = client.get('/health', headers={'X-Request-ID': 'abc123'})
    assert r2.headers['X-Request-ID'] == 'abc123'


def test_student_crud_flow(client):
    created = _add_student(client)
    assert Decimal(created['balance']) == Decimal('0')
    assert created['enrollment_status'] == 'ACTIVE'
    assert created['course'] is None
    sid = created['student_id']

    assert client.get(f'/students/{sid}').json()['name'] == 'Ada'
    assert [s['student_id'] for s in client.get('/students').json()] == [sid]

    r = client.put(f'/students/{sid}', json={'name': 'Ada King', 'enrollment_status': 'inactive'})
    assert r.status_code == 200
    assert r.json()['name'] == 'Ada King'
    assert r.json()['enrollment_status'] == 'INACTIVE'
    assert r.json()['email'] == 'ada@example.com'

    assert client.delete(f'/students/{sid}').status_code == 204
    assert client.get(f'/students/{sid}').status_code == 404
    assert client.delete(f'/students/{sid}').status_code == 404


def test_duplicate_email_conflict(client):
    _add_student(client)
    r = client.post('/students', json={'name': 'Other', 'email': 'ada@example.com'})
    assert r.status_code == 409
    assert 'email' in r.json()['detail']
    assert len(client.get('/students').json()) == 1


def test_invalid_payloads(client):
    assert client.post('/students', json={'name': ''}).status_code == 400
    assert client.post('/students', json={'name': '   '}).status_code == 400
    assert client.post('/students', json={'name': 'Ada', 'email': 'nope'}).status_code == 400
    sid = _add_student(client)['student_id']
    assert client.post(f'/students/{sid}/payments', json={'amount': '-1'}).status_code == 400
    assert client.post(f'/students/{sid}/payments', json={'amount': '1.234'}).status_code == 400


def test_enroll_flow(client):
    sid = _add_student(client)['student_id']
    course = client.post('/courses', json={'course_name': 'Chemistry', 'duration': '2 years'})
    assert course.status_code == 201
    cid = course.json()['course_id']

    r = client.post(f'/students/{sid}/enroll', json={'course_id': cid})
    assert r.status_code == 200
    assert r.json()['course']['course_name'] == 'Chemistry'

    missing = client.post(f'/students/{sid}/enroll', json={'course_id': 999})
    assert missing.status_code == 404
    assert client.get(f'/students/{sid}').json()['course']['course_id'] == cid

    # a course with enrolled students stays
    assert client.delete(f'/courses/{cid}').status_code == 409


def test_course_endpoints(client):
    cid = client.post('/courses', json={'course_name': 'Art'}).json()['course_id']
    r = client.put(f'/courses/{cid}', json={'duration': '10 weeks'})
    assert r.json() == {'course_id': cid, 'course_name': 'Art', 'duration': '10 weeks'}
    assert [c['course_name'] for c in client.get('/courses').json()] == ['Art']
    assert client.delete(f'/courses/{cid}').status_code == 204
    assert client.get(f'/courses/{cid}').status_code == 404


def test_payment_and_refund_flow(client):
    sid = _add_student(client)['student_id']

    paid = client.post(f'/students/{sid}/payments', json={'amount': '100.00'})
    assert paid.status_code == 201
    assert paid.json()['payment_type'] == 'payment'
    assert Decimal(paid.json()['amount']) == Decimal('100.00')
    assert Decimal(client.get(f'/students/{sid}').json()['balance']) == Decimal('100.00')

    refunded = client.post(f'/students/{sid}/refunds', json={'amount': '40.00'})
    assert refunded.status_code == 201
    assert refunded.json()['payment_type'] == 'refund'
    assert Decimal(client.get(f'/students/{sid}').json()['balance']) == Decimal('60.00')

    too_much = client.post(f'/students/{sid}/refunds', json={'amount': '60.01'})
    assert too_much.status_code == 400
    assert Decimal(client.get(f'/students/{sid}').json()['balance']) == Decimal('60.00')

    history = client.get(f'/students/{sid}/payments').json()
    assert [h['payment_type'] for h in history] == ['payment', 'refund']

    # payment history keeps the student alive
    assert client.delete(f'/students/{sid}').status_code == 409


def test_payment_for_unknown_student(client):
    assert client.post('/students/999/payments', json={'amount': '5.00'}).status_code == 404
    assert client.get('/students/999/payments').status_code == 404


def test_validation_errors_share_status_and_shape(client):
    r = client.post('/courses', json={'course_name': ''})
    assert r.status_code == 400
    assert 'detail' in r.json()
    assert client.post('/students/1/enroll', json={}).status_code == 400


def test_ids_beyond_integer_range_are_not_found(client):
    huge = 99999999999999999999
    sid = _add_student(client)['student_id']
    assert client.get(f'/students/{huge}').status_code == 404
    assert client.get(f'/courses/{huge}').status_code == 404
    assert client.delete(f'/students/{huge}').status_code == 404
    assert client.put(f'/students/{huge}', json={'name': 'X'}).status_code == 404
    assert client.post(f'/students/{huge}/payments', json={'amount': '5.00'}).status_code == 404
    assert client.get(f'/students/{huge}/payments').status_code == 404
    assert client.post(f'/students/{sid}/enroll', json={'course_id': huge}).status_code == 404
    assert client.get(f'/students/{sid}').json()['course'] is None
