"""
Tests for the error hierarchy and the JSON error handlers.
"""

from werkzeug.exceptions import NotFound

from studymate.utils.error_handlers import (
    AppError, ValidationError, NotFoundError, RateLimitError, DatabaseError,
    AIServiceError, handle_error,
)


class TestErrorClasses:

    def test_status_codes(self):
        assert ValidationError('bad').status_code == 400
        assert NotFoundError('User').status_code == 404
        assert RateLimitError().status_code == 429
        assert DatabaseError().status_code == 500
        assert AIServiceError().status_code == 500

    def test_messages_and_codes(self):
        assert NotFoundError('User').message == 'User not found'
        assert NotFoundError().message == 'Resource not found'
        assert AIServiceError().message == 'AI service error occurred'
        error = ValidationError('Content is required', 'content')
        assert error.code == 'VALIDATION_ERROR'
        assert error.field == 'content'
        assert error.is_operational

    def test_subclasses_are_app_errors(self):
        for error in (ValidationError('x'), NotFoundError(), RateLimitError(),
                      DatabaseError(), AIServiceError()):
            assert isinstance(error, AppError)


class TestHandleError:

    def test_app_error(self):
        assert handle_error(ValidationError('bad input')) == ('bad input', 400)

    def test_http_exception(self):
        message, status = handle_error(NotFound())
        assert status == 404
        assert message

    def test_unexpected_exception_is_hidden(self):
        assert handle_error(RuntimeError('secret detail')) == ('Internal server error', 500)


class TestRegisteredHandlers:

    def test_unknown_route_returns_json(self, client):
        response = client.get('/api/does-not-exist')
        assert response.status_code == 404
        assert 'error' in response.get_json()

    def test_method_not_allowed_returns_json(self, client):
        response = client.patch('/api/analyze')
        assert response.status_code == 405
        assert 'error' in response.get_json()

    def test_unexpected_error_returns_500(self, app, db_session):
        @app.route('/boom')
        def boom():
            raise RuntimeError('kaboom')

        response = app.test_client().get('/boom')
        assert response.status_code == 500
        assert response.get_json() == {'error': 'Internal server error'}

    def test_security_headers_present(self, client):
        response = client.get('/health')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'
