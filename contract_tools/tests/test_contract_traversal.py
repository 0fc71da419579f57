from contract_tools.contract.extractor import extract
from contract_tools.contract.model import Property, TypeReference
from contract_tools.contract.router import create_router, query
from contract_tools.contract.traversal import (
    element_path,
    key_path,
    member_path,
    property_path,
    value_path,
    walk,
)

STRING = TypeReference(kind="primitive", base_type="string")
NUMBER = TypeReference(kind="primitive", base_type="number")


class TestPaths:
    def test_path_scheme(self):
        assert property_path("users.get.input", "name") == "users.get.input.name"
        assert element_path("types.User.tags") == "types.User.tags[]"
        assert member_path("x", 2) == "x[2]"
        assert key_path("x") == "x.key"
        assert value_path("x") == "x.value"


class TestWalk:
    def test_every_kind(self):
        root = TypeReference(
            kind="object",
            name="Root",
            properties=(
                Property("tags", TypeReference(kind="array", element_type=STRING), True),
                Property(
                    "nick",
                    TypeReference(
                        kind="optional",
                        base_type=TypeReference(kind="nullable", base_type=STRING),
                    ),
                    False,
                ),
                Property("shape", TypeReference(kind="union", union_types=(STRING, NUMBER)), True),
                Property("pair", TypeReference(kind="tuple", tuple_elements=(STRING, NUMBER)), True),
                Property(
                    "scores",
                    TypeReference(kind="record", key_type=STRING, value_type=NUMBER),
                    True,
                ),
            ),
        )
        visits = list(walk(root, "r"))

        assert [(v.path, v.type_ref.kind) for v in visits] == [
            ("r", "object"),
            ("r.tags", "array"),
            ("r.tags[]", "primitive"),
            ("r.nick", "optional"),
            ("r.nick", "nullable"),
            ("r.nick", "primitive"),
            ("r.shape", "union"),
            ("r.shape[0]", "primitive"),
            ("r.shape[1]", "primitive"),
            ("r.pair", "tuple"),
            ("r.pair[0]", "primitive"),
            ("r.pair[1]", "primitive"),
            ("r.scores", "record"),
            ("r.scores.key", "primitive"),
            ("r.scores.value", "primitive"),
        ]

    def test_property_only_on_field_node(self):
        nick = Property(
            "nick",
            TypeReference(kind="optional", base_type=STRING),
            False,
        )
        root = TypeReference(kind="object", name="Root", properties=(nick,))
        visits = list(walk(root, "r"))

        assert [v.property for v in visits] == [None, nick, None]

    def test_primitive_root(self):
        visits = list(walk(STRING, "users.get.input"))
        assert len(visits) == 1
        assert visits[0].type_ref is STRING

    def test_extracted_contract_counts(self):
        router = create_router(
            {"users": {"get": query(
                {"type": "string"},
                {"$ref": "#/components/schemas/User"},
            )}},
            components={
                "User": {
                    "type": "object",
                    "required": ["id", "tags", "profile"],
                    "properties": {
                        "id": {"type": "string"},
                        "tags": {"type": "array", "items": {"type": "string"}},
                        "profile": {"$ref": "#/components/schemas/Profile"},
                    },
                },
                "Profile": {"type": "object", "properties": {"bio": {"type": "string"}}},
            },
        )
        contract = extract(router)
        visits = list(walk(contract.endpoints[0].output, "users.get.output"))

        assert [v.path for v in visits] == [
            "users.get.output",
            "users.get.output.id",
            "users.get.output.tags",
            "users.get.output.tags[]",
            "users.get.output.profile",
            "users.get.output.profile.bio",
            "users.get.output.profile.bio",
        ]
        assert [v.property.name for v in visits if v.property] == ["id", "tags", "profile", "bio"]
