from api_normalizer.parser.auth import NO_AUTH, detect_document_auth, detect_operation_auth
from api_normalizer.parser.base import AuthDescriptor


class TestDocumentAuth:
    def test_openapi_components(self):
        doc = {
            "components": {"securitySchemes": {"token": {"type": "http", "scheme": "bearer"}}},
            "security": [{"token": []}],
        }
        assert detect_document_auth(doc) == AuthDescriptor(type="http", required=True, location="header")

    def test_openapi_schemes_without_top_level_security(self):
        doc = {"components": {"securitySchemes": {"key": {"type": "apiKey", "in": "query", "name": "k"}}}}
        assert detect_document_auth(doc) == AuthDescriptor(type="apiKey", required=False, location="query")

    def test_swagger_security_definitions(self):
        doc = {"securityDefinitions": {"basicAuth": {"type": "basic"}}, "security": [{"basicAuth": []}]}
        assert detect_document_auth(doc).type == "basic"

    def test_raml_scheme_without_headers_uses_query(self):
        doc = {"securitySchemes": {"token": {"type": "Pass Through", "describedBy": {"queryParameters": {"t": {}}}}}}
        assert detect_document_auth(doc) == AuthDescriptor(type="Pass Through", required=True, location="query")

    def test_generic_auth_object(self):
        auth = detect_document_auth({"authentication": {"type": "oauth2", "location": "query"}})
        assert auth == AuthDescriptor(type="oauth2", required=True, location="query")

    def test_generic_auth_string(self):
        assert detect_document_auth({"auth": "bearer"}).type == "bearer"

    def test_openapi_schemes_take_priority(self):
        doc = {
            "components": {"securitySchemes": {"key": {"type": "apiKey", "in": "header"}}},
            "auth": {"type": "basic"},
        }
        assert detect_document_auth(doc).type == "apiKey"

    def test_nothing_declared(self):
        auth = detect_document_auth({"title": "x"})
        assert auth == NO_AUTH
        assert auth.is_none
        assert auth.required is False


class TestOperationAuth:
    def test_security_list(self):
        assert detect_operation_auth({"security": [{"a": []}, {"b": []}]}) == AuthDescriptor(
            type="multiple", required=True, location="header"
        )

    def test_secured_by_mapping(self):
        assert detect_operation_auth({"securedBy": {"type": "digest"}}).type == "digest"

    def test_secured_by_mapping_without_type(self):
        assert detect_operation_auth({"securedBy": {"scopes": ["read"]}}).type == "apiKey"

    def test_empty_security_list_is_still_secured(self):
        assert detect_operation_auth({"security": []}) == AuthDescriptor(
            type="multiple", required=True, location="header"
        )

    def test_null_security_is_ignored(self):
        assert detect_operation_auth({"security": None, "securedBy": {"type": "basic"}}).type == "basic"
        assert detect_operation_auth({"securedBy": None}) == NO_AUTH

    def test_missing_security(self):
        assert detect_operation_auth({"summary": "x"}).is_none
