import pytest

from contract_tools.contract.extractor import extract
from contract_tools.contract.model import TypeReference, ValidationRules
from contract_tools.contract.router import create_router, mutation, query
from contract_tools.framework.types import ValidationContext
from contract_tools.targets.go_server import GO_SUPPORT, GoServerTarget, GoTypeMapper, GoValidationMapper

STRING = TypeReference(kind="primitive", base_type="string")

COMPONENTS = {
    "User": {
        "type": "object",
        "required": ["id", "email", "age", "role", "bio", "created_at"],
        "properties": {
            "id": {"type": "string", "format": "uuid"},
            "email": {"$ref": "#/components/schemas/Email"},
            "age": {"type": "integer", "minimum": 18},
            "role": {"$ref": "#/components/schemas/Role"},
            "nick": {"type": "string", "minLength": 2},
            "bio": {"type": ["string", "null"], "maxLength": 100},
            "tags": {"type": "array", "items": {"type": "string"}, "maxItems": 5},
            "created_at": {"type": "string", "format": "date-time"},
        },
    },
    "Email": {"type": "string", "format": "email"},
    "Role": {"enum": ["admin", "member"]},
}


@pytest.fixture
def contract():
    router = create_router(
        {"users": {
            "get": query(
                {"type": "object", "required": ["id"], "properties": {"id": {"type": "string"}}},
                {"$ref": "#/components/schemas/User"},
            ),
        }},
        components=COMPONENTS,
    )
    return extract(router)


@pytest.fixture
def files(contract):
    output = GoServerTarget().run(contract)
    return {f.path: f.content for f in output.files}


def validation_context(rule, value, base_type="string", field_path="in.Name"):
    return ValidationContext(
        rule=rule,
        value=value,
        field_name="name",
        field_path=field_path,
        base_type=base_type,
        is_required=True,
        all_rules=ValidationRules(),
    )


class TestGoTypeMapper:
    @pytest.mark.parametrize("base, expected", [
        ("string", "string"),
        ("number", "float64"),
        ("integer", "int64"),
        ("boolean", "bool"),
    ])
    def test_primitives(self, base, expected):
        assert GoTypeMapper().map(TypeReference(kind="primitive", base_type=base)).type == expected

    def test_named_types_use_identifier(self):
        mapper = GoTypeMapper()
        assert mapper.map(TypeReference(kind="object", name="user_profile")).type == "UserProfile"
        assert mapper.map(TypeReference(kind="array", name="Tags", element_type=STRING)).type == "Tags"

    def test_nullable_pointer(self):
        mapper = GoTypeMapper()
        user = TypeReference(kind="object", name="User")
        assert mapper.map(TypeReference(kind="nullable", base_type=user)).type == "*User"
        tags = TypeReference(kind="array", element_type=STRING)
        assert mapper.map(TypeReference(kind="nullable", base_type=tags)).type == "[]string"

    def test_optional_is_transparent(self):
        assert GoTypeMapper().map(TypeReference(kind="optional", base_type=STRING)).type == "string"

    def test_record_and_date(self):
        mapper = GoTypeMapper()
        record = TypeReference(
            kind="record",
            key_type=STRING,
            value_type=TypeReference(kind="date"),
        )
        assert mapper.map(record).type == "map[string]time.Time"
        assert mapper.get_collected_imports() == ["time"]

    def test_enum_declared_once(self):
        mapper = GoTypeMapper()
        role = TypeReference(kind="enum", name="Role", enum_values=("admin", "member"))
        mapper.map(role)
        mapper.map(role)

        (utility,) = mapper.get_collected_utilities()
        assert utility.code == (
            'type Role string\n\nconst (\n\tRoleAdmin Role = "admin"\n\tRoleMember Role = "member"\n)'
        )

    def test_union_falls_back(self, caplog):
        union = TypeReference(kind="union", union_types=(STRING, STRING))
        assert GoTypeMapper().map(union).type == "interface{}"
        assert 'Type kind "union" is not fully supported' in caplog.text


class TestGoValidationMapper:
    def test_string_checks_convert(self):
        mapper = GoValidationMapper()
        result = mapper.map_validation("email", validation_context("email", True))
        assert result.validation.condition == "!isValidEmail(string(in.Name))"
        assert mapper.get_collected_imports() == ["net/mail"]

    def test_regex(self):
        result = GoValidationMapper().map_validation("regex", validation_context("regex", "^[a-z]+$"))
        assert result.validation.condition == "!regexp.MustCompile(`^[a-z]+$`).MatchString(string(in.Name))"
        assert result.imports == ("regexp",)

    def test_numeric_bounds(self):
        mapper = GoValidationMapper()
        ctx = validation_context("min", 0.5, "number", "in.Score")
        assert mapper.map_validation("min", ctx).validation.condition == "float64(in.Score) < 0.5"
        ctx = validation_context("max", 10.0, "number", "in.Score")
        assert mapper.map_validation("max", ctx).validation.message == "must be at most 10"

    def test_int_on_integer_is_noop(self):
        mapper = GoValidationMapper()
        assert mapper.map_validation("int", validation_context("int", True, "integer")).validation.condition is None
        number = mapper.map_validation("int", validation_context("int", True, "number", "in.Score"))
        assert number.validation.condition == "in.Score != math.Trunc(in.Score)"


class TestGoServerTarget:
    def test_support(self):
        assert GO_SUPPORT.find_unsupported_type("tuple").fallback == "[]interface{}"
        assert "union" not in GO_SUPPORT.supported_types

    def test_files(self, files):
        assert list(files) == ["types.go", "validation.go", "router.go"]
        assert files["types.go"].startswith("// Code generated by contract-tools. DO NOT EDIT.\n\npackage server\n")

    def test_structs(self, files):
        types_go = files["types.go"]
        assert 'import (\n\t"time"\n)' in types_go
        assert "type UsersGetInput struct {\n\tId string `json:\"id\"`\n}" in types_go
        for line in [
            '\tId string `json:"id"`',
            '\tEmail Email `json:"email"`',
            '\tAge int64 `json:"age"`',
            '\tRole Role `json:"role"`',
            '\tNick string `json:"nick,omitempty"`',
            '\tBio *string `json:"bio"`',
            '\tTags []string `json:"tags,omitempty"`',
            '\tCreatedAt time.Time `json:"created_at"`',
        ]:
            assert line in types_go

    def test_aliases_and_enums(self, files):
        types_go = files["types.go"]
        assert "type Email string" in types_go
        assert types_go.count("type Role string") == 1
        assert 'RoleMember Role = "member"' in types_go

    def test_validators(self, files):
        validation_go = files["validation.go"]
        assert 'import (\n\t"net/mail"\n\t"regexp"\n\t"strings"\n)' in validation_go
        assert "func ValidateUser(in *User) error {" in validation_go
        assert "func ValidateUsersGetInput(in *UsersGetInput) error {" in validation_go
        assert "if !isValidUUID(string(in.Id)) {" in validation_go
        assert 'errs = append(errs, ValidationError{Field: "id", Message: "must be a valid UUID"})' in validation_go
        assert "if !isValidEmail(string(in.Email)) {" in validation_go
        assert "if float64(in.Age) < 18 {" in validation_go
        assert "math.Trunc" not in validation_go
        assert "func isValidEmail(value string) bool {" in validation_go

    def test_guards(self, files):
        validation_go = files["validation.go"]
        assert '\tif in.Nick != "" {\n\t\tif len(in.Nick) < 2 {' in validation_go
        assert "\tif in.Bio != nil {\n\t\tvalue := *in.Bio\n\t\tif len(value) > 100 {" in validation_go
        assert "\tif len(in.Tags) > 0 {\n\t\tif len(in.Tags) > 5 {" in validation_go

    def test_custom_package(self, contract):
        output = GoServerTarget(package="api").run(contract)
        assert all("\npackage api\n" in f.content for f in output.files)

    def test_union_and_tuple_degrade(self):
        contract = extract(create_router({"shapes": {"put": mutation(
            {
                "type": "object",
                "required": ["shape", "point"],
                "properties": {
                    "shape": {"oneOf": [{"type": "string"}, {"type": "number"}]},
                    "point": {"type": "array", "prefixItems": [{"type": "number"}, {"type": "number"}]},
                },
            },
            {"type": "boolean"},
        )}}))
        output = GoServerTarget().run(contract)

        assert output.ok
        assert [(d.severity, d.hint) for d in output.diagnostics] == [
            ("warning", "Will fall back to: interface{}"),
            ("warning", "Will fall back to: []interface{}"),
        ]
        assert '\tShape interface{} `json:"shape"`' in output.files[0].content
        assert '\tPoint []interface{} `json:"point"`' in output.files[0].content

    def test_repeated_runs_are_identical(self, contract):
        target = GoServerTarget()
        assert target.run(contract).files == target.run(contract).files


NESTED_COMPONENTS = {
    "Profile": {
        "type": "object",
        "required": ["bio"],
        "properties": {"bio": {"type": "string", "minLength": 3}},
    },
    "Account": {
        "type": "object",
        "required": ["profile", "friends", "backup", "previous"],
        "properties": {
            "profile": {"$ref": "#/components/schemas/Profile"},
            "friends": {"type": "array", "items": {"$ref": "#/components/schemas/Profile"}},
            "backup": {"anyOf": [{"$ref": "#/components/schemas/Profile"}, {"type": "null"}]},
            "previous": {
                "type": "array",
                "items": {"anyOf": [{"$ref": "#/components/schemas/Profile"}, {"type": "null"}]},
            },
            "draft": {"$ref": "#/components/schemas/Profile"},
        },
    },
}


@pytest.fixture
def nested_files():
    router = create_router(
        {
            "accounts": {
                "get": query({"type": "string"}, {"$ref": "#/components/schemas/Account"}),
                "update": mutation(
                    {"$ref": "#/components/schemas/Account"},
                    {"type": "string", "format": "date-time"},
                ),
            },
        },
        components=NESTED_COMPONENTS,
    )
    output = GoServerTarget().run(extract(router))
    return {f.path: f.content for f in output.files}


class TestNestedValidation:
    def test_named_object_field(self, nested_files):
        validation_go = nested_files["validation.go"]
        assert "func ValidateProfile(in *Profile) error {" in validation_go
        assert (
            "\tif err := ValidateProfile(&in.Profile); err != nil {\n"
            '\t\terrs = append(errs, prefixErrors("profile", err)...)\n'
            "\t}"
        ) in validation_go

    def test_array_elements(self, nested_files):
        validation_go = nested_files["validation.go"]
        assert (
            "\tfor i := range in.Friends {\n"
            "\t\tif err := ValidateProfile(&in.Friends[i]); err != nil {\n"
            '\t\t\terrs = append(errs, prefixErrors("friends[" + strconv.Itoa(i) + "]", err)...)\n'
            "\t\t}\n"
            "\t}"
        ) in validation_go
        assert '\t"strconv"\n' in validation_go

    def test_pointers_are_guarded(self, nested_files):
        validation_go = nested_files["validation.go"]
        assert "\tif in.Backup != nil {\n\t\tif err := ValidateProfile(in.Backup); err != nil {" in validation_go
        assert (
            "\tfor i := range in.Previous {\n"
            "\t\tif in.Previous[i] != nil {\n"
            "\t\t\tif err := ValidateProfile(in.Previous[i]); err != nil {"
        ) in validation_go

    def test_optional_value_struct_is_skipped(self, nested_files):
        assert "in.Draft" not in nested_files["validation.go"]

    def test_errors_are_prefixed(self, nested_files):
        validation_go = nested_files["validation.go"]
        assert "func prefixErrors(prefix string, err error) ValidationErrors {" in validation_go
        assert 'Field: prefix + "." + e.Field' in validation_go

    def test_primitive_fields_have_no_nested_call(self, files):
        validation_go = files["validation.go"]
        assert "prefixErrors(\"" not in validation_go
        assert '"strconv"' not in validation_go


class TestRouter:
    def test_handler_interface(self, nested_files):
        router_go = nested_files["router.go"]
        assert "type Handler interface {" in router_go
        assert "\tAccountsGet(ctx context.Context, in string) (Account, error)\n" in router_go
        assert "\tAccountsUpdate(ctx context.Context, in Account) (time.Time, error)\n" in router_go

    def test_imports(self, nested_files):
        assert 'import (\n\t"context"\n\t"encoding/json"\n\t"fmt"\n\t"time"\n)' in nested_files["router.go"]

    def test_dispatch_by_full_name(self, nested_files):
        router_go = nested_files["router.go"]
        assert "func Dispatch(ctx context.Context, h Handler, endpoint string, body []byte) (interface{}, error) {" in router_go
        assert '\tcase "accounts.get":\n\t\tvar in string\n' in router_go
        assert '\t\treturn h.AccountsGet(ctx, in)\n' in router_go
        assert 'return nil, fmt.Errorf("unknown endpoint %q", endpoint)' in router_go

    def test_object_input_is_validated(self, nested_files):
        router_go = nested_files["router.go"]
        assert (
            '\tcase "accounts.update":\n'
            "\t\tvar in Account\n"
            "\t\tif err := json.Unmarshal(body, &in); err != nil {\n"
            "\t\t\treturn nil, err\n"
            "\t\t}\n"
            "\t\tif err := ValidateAccount(&in); err != nil {\n"
        ) in router_go
        get_case = router_go.split('case "accounts.get":')[1].split("case ")[0]
        assert "Validate" not in get_case

    def test_endpoint_types(self, nested_files):
        router_go = nested_files["router.go"]
        assert '\t"accounts.get": "query",\n\t"accounts.update": "mutation",\n' in router_go

    def test_user_profile_validation(self):
        components = {
            "User": {
                "type": "object",
                "required": ["profile"],
                "properties": {"profile": {"$ref": "#/components/schemas/Profile"}},
            },
            "Profile": {
                "type": "object",
                "required": ["bio"],
                "properties": {"bio": {"type": "string", "minLength": 3}},
            },
        }
        router = create_router(
            {"users": {"get": query({"type": "string"}, {"$ref": "#/components/schemas/User"})}},
            components=components,
        )
        files = {f.path: f.content for f in GoServerTarget().run(extract(router)).files}
        assert "ValidateProfile(&in.Profile)" in files["validation.go"]
        assert "if len(in.Bio) < 3 {" in files["validation.go"]
        assert "\tUsersGet(ctx context.Context, in string) (User, error)\n" in files["router.go"]
