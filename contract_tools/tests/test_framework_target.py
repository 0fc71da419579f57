import pytest

from contract_tools.contract.extractor import extract
from contract_tools.contract.model import TYPE_KINDS
from contract_tools.contract.router import create_router, query
from contract_tools.framework.target import TargetGeneratorBase
from contract_tools.framework.type_mapper import TypeMapperBase
from contract_tools.framework.types import GeneratedFile, GeneratedUtility, TypeResult, create_support
from contract_tools.shared.errors import IncompleteMapperError

MARKER = GeneratedUtility("marker", "// marker")


class NameMapper(TypeMapperBase[str]):
    def __init__(self, kinds=TYPE_KINDS):
        super().__init__()
        self.type_mapping = {kind: self.map_any for kind in kinds}

    def map_any(self, ctx):
        return TypeResult(ctx.name or ctx.type_ref.kind, utilities=(MARKER,))


class ListingTarget(TargetGeneratorBase):
    name = "listing"
    description = "One line per endpoint"
    support = create_support(supported_types=["object", "primitive"], supported_validations=())

    def __init__(self, kinds=TYPE_KINDS):
        self.type_mapper = NameMapper(kinds)
        super().__init__()
        self.utility_counts = []

    def generate(self, contract):
        self.utility_counts.append(len(self.type_mapper.get_collected_utilities()))
        lines = [
            f"{e.full_name}: {self.type_mapper.map(e.input).type} -> {self.type_mapper.map(e.output).type}"
            for e in contract.endpoints
        ]
        return [GeneratedFile("endpoints.txt", "\n".join(lines))]


@pytest.fixture
def contract():
    return extract(create_router({"users": {"get": query(
        {"type": "object", "properties": {"id": {"type": "string"}}},
        {"type": "string", "minLength": 1},
    )}}))


class TestTargetGeneratorBase:
    def test_incomplete_mapper_fails_at_construction(self):
        with pytest.raises(IncompleteMapperError) as exc_info:
            ListingTarget(kinds=[k for k in TYPE_KINDS if k != "date"])
        assert exc_info.value.missing == ("date",)

    def test_run(self, contract):
        output = ListingTarget().run(contract)

        assert output.files == [GeneratedFile("endpoints.txt", "users.get: UsersGetInput -> primitive")]
        assert [d.message for d in output.diagnostics] == [
            'Type "optional" is not supported by listing',
            'Validation "minLength" is not supported by listing',
        ]
        assert not output.ok

    def test_run_resets_mappers(self, contract):
        target = ListingTarget()
        target.run(contract)
        target.run(contract)
        assert target.utility_counts == [0, 0]

    def test_validate_contract_uses_target_name(self, contract):
        diagnostics = ListingTarget().validate_contract(contract)
        assert all("listing" in d.message for d in diagnostics)
