"""
Shared constants for the TypeScript OpenAPI type generator.
"""

from typing import Final

# Supported OpenAPI major versions
OPENAPI_V2: Final = 2
OPENAPI_V3: Final = 3
SUPPORTED_VERSIONS: Final = frozenset({OPENAPI_V2, OPENAPI_V3})

# HTTP methods allowed on a Path Item, per version
HTTP_METHODS_V2: Final = ("get", "put", "post", "delete", "options", "head", "patch")
HTTP_METHODS_V3: Final = (*HTTP_METHODS_V2, "trace")

# Parameter locations emitted under an operation's ``parameters`` member
PARAMETER_LOCATIONS: Final = ("query", "header", "path", "cookie")

# V2 parameter locations that describe a request body
BODY_LOCATIONS: Final = frozenset({"body", "formData"})

# Media types used when V2 documents omit consumes/produces
DEFAULT_MEDIA_TYPE: Final = "application/json"
FORM_URLENCODED_MEDIA_TYPE: Final = "application/x-www-form-urlencoded"
MULTIPART_MEDIA_TYPE: Final = "multipart/form-data"

# Reusable-object kinds held by the components/definitions bag
SCHEMAS: Final = "schemas"
RESPONSES: Final = "responses"
PARAMETERS: Final = "parameters"
REQUEST_BODIES: Final = "requestBodies"
HEADERS: Final = "headers"
PATH_ITEMS: Final = "pathItems"
EXAMPLES: Final = "examples"
SECURITY_SCHEMES: Final = "securitySchemes"
LINKS: Final = "links"
CALLBACKS: Final = "callbacks"

TYPED_COMPONENT_KINDS: Final = (SCHEMAS, RESPONSES, PARAMETERS, REQUEST_BODIES, HEADERS, PATH_ITEMS)
RAW_COMPONENT_KINDS: Final = (EXAMPLES, SECURITY_SCHEMES, LINKS, CALLBACKS)

# V2 top-level sections and the bag kind each one feeds
V2_SECTIONS: Final = {
    "definitions": SCHEMAS,
    "parameters": PARAMETERS,
    "responses": RESPONSES,
}

DEFAULT_COMMENT_HEADER: Final = """/**
 * This file was auto-generated by ts-oas-types.
 * Do not make direct changes to the file.
 */
"""

DEFAULT_HTTP_METHOD: Final = "GET"

PATHS_ENUM_NAME: Final = "ApiPaths"
