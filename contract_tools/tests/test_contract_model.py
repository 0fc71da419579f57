import pytest

from contract_tools.contract.model import (
    TYPE_KINDS,
    VALIDATION_KINDS,
    ContractDefinition,
    Endpoint,
    EndpointGroup,
    MiddlewareDefinition,
    Property,
    Router,
    TypeReference,
    ValidationRules,
    get_validations_for_type,
    is_type_kind,
    is_validation_kind,
)


def _string(**rules):
    return TypeReference(
        kind="primitive",
        base_type="string",
        validation=ValidationRules(**rules) if rules else None,
    )


class TestKinds:
    def test_eleven_type_kinds(self):
        assert len(TYPE_KINDS) == 11
        assert len(set(TYPE_KINDS)) == 11

    def test_thirteen_validation_kinds(self):
        assert len(VALIDATION_KINDS) == 13

    def test_is_type_kind(self):
        assert is_type_kind("tuple")
        assert not is_type_kind("Tuple")
        assert not is_type_kind("set")
        assert not is_type_kind(None)

    def test_is_validation_kind(self):
        assert is_validation_kind("minLength")
        assert not is_validation_kind("min_length")

    def test_validations_for_type(self):
        assert get_validations_for_type("string") == (
            "minLength", "maxLength", "email", "url", "uuid", "regex",
        )
        assert get_validations_for_type("integer") == get_validations_for_type("number")
        assert get_validations_for_type("array") == ("minItems", "maxItems")
        assert get_validations_for_type("boolean") == ()


class TestValidationRules:
    def test_empty_is_falsy(self):
        assert not ValidationRules()
        assert ValidationRules(min=0)

    def test_items_in_kind_order(self):
        rules = ValidationRules(max_items=3, regex="^a", min_length=1)
        assert list(rules.items()) == [("minLength", 1), ("regex", "^a"), ("maxItems", 3)]

    def test_get_by_wire_name(self):
        rules = ValidationRules(min_length=5)
        assert rules.get("minLength") == 5
        assert rules.get("maxLength") is None

    def test_dict_round_trip(self):
        rules = ValidationRules(min_length=2, email=True, int=True)
        assert rules.to_dict() == {"minLength": 2, "email": True, "int": True}
        assert ValidationRules.from_dict(rules.to_dict()) == rules

    def test_from_dict_ignores_unknown(self):
        assert ValidationRules.from_dict({"between": 1, "min": 2}) == ValidationRules(min=2)

    def test_frozen(self):
        rules = ValidationRules(min=1)
        with pytest.raises(AttributeError):
            rules.min = 2


class TestTypeReference:
    def test_unwrap(self):
        inner = _string()
        chain = TypeReference(
            kind="optional",
            base_type=TypeReference(kind="nullable", base_type=inner),
        )
        assert chain.unwrap() is inner
        assert inner.unwrap() is inner

    def test_to_dict_omits_unset(self):
        assert _string().to_dict() == {"kind": "primitive", "baseType": "string"}

    def test_to_dict_nested(self):
        ref = TypeReference(
            kind="object",
            name="User",
            properties=(
                Property("tags", TypeReference(kind="array", element_type=_string()), True),
                Property("name", _string(), False, ValidationRules(min_length=1)),
            ),
        )
        assert ref.to_dict() == {
            "kind": "object",
            "name": "User",
            "properties": [
                {
                    "name": "tags",
                    "type": {
                        "kind": "array",
                        "elementType": {"kind": "primitive", "baseType": "string"},
                    },
                    "required": True,
                },
                {
                    "name": "name",
                    "type": {"kind": "primitive", "baseType": "string"},
                    "required": False,
                    "validation": {"minLength": 1},
                },
            ],
        }

    def test_literal_false_is_serialized(self):
        ref = TypeReference(kind="literal", literal_value=False)
        assert ref.to_dict() == {"kind": "literal", "literalValue": False}

    def test_record_and_tuple(self):
        record = TypeReference(kind="record", key_type=_string(), value_type=_string())
        assert set(record.to_dict()) == {"kind", "keyType", "valueType"}
        pair = TypeReference(kind="tuple", tuple_elements=(_string(), _string()))
        assert len(pair.to_dict()["tupleElements"]) == 2


class TestContractDefinition:
    def _contract(self):
        user = TypeReference(kind="object", name="User", properties=())
        endpoint = Endpoint("get", "query", _string(), user, "users.get")
        return ContractDefinition(
            routers=(Router("router", (EndpointGroup("users", (endpoint,)),)),),
            types=(user,),
            endpoints=(endpoint,),
            middleware=(MiddlewareDefinition("auth"),),
        )

    def test_lookup(self):
        contract = self._contract()
        assert contract.get_type("User").name == "User"
        assert contract.get_type("Missing") is None
        assert contract.get_endpoint("users.get").name == "get"
        assert contract.get_endpoint("users.list") is None

    def test_to_dict(self):
        data = self._contract().to_dict()
        assert data["routers"] == [{
            "name": "router",
            "endpointGroups": [{"name": "users", "endpoints": ["users.get"]}],
        }]
        assert data["endpoints"][0]["fullName"] == "users.get"
        assert data["endpoints"][0]["type"] == "query"
        assert data["middleware"] == [{"name": "auth"}]
