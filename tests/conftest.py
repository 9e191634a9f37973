"""Shared test fixtures."""

import pytest
from casbin.model import Model

from casbin_table_adapter import TableAdapter
from casbin_table_adapter.tables import InMemoryTable

RBAC_MODEL = """
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act
p2 = sub, obj, act

[role_definition]
g = _, _
g2 = _, _

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = g(r.sub, p.sub) && r.obj == p.obj && r.act == p.act
"""

DOMAIN_MODEL = """
[request_definition]
r = sub, dom, obj, act

[policy_definition]
p = sub, dom, obj, act

[role_definition]
g = _, _, _

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = g(r.sub, p.sub, r.dom) && r.dom == p.dom && r.obj == p.obj && r.act == p.act
"""


def _build_model(text: str) -> Model:
    model = Model()
    model.load_model_from_text(text)
    return model


@pytest.fixture
def make_model():
    """Return a factory for empty models: ``make_model()`` or ``make_model(domains=True)``."""

    def build(domains: bool = False) -> Model:
        return _build_model(DOMAIN_MODEL if domains else RBAC_MODEL)

    return build


@pytest.fixture
def table():
    return InMemoryTable()


@pytest.fixture
def adapter(table):
    return TableAdapter(table)


@pytest.fixture
def rbac_model(make_model):
    model = make_model()
    model.add_policy("p", "p", ["alice", "data1", "read"])
    model.add_policy("p", "p", ["bob", "data2", "write"])
    model.add_policy("g", "g", ["alice", "data2_admin"])
    return model


@pytest.fixture
def domain_model(make_model):
    model = make_model(domains=True)
    model.add_policy("p", "p", ["admin", "domain1", "data1", "read"])
    model.add_policy("p", "p", ["admin", "domain1", "data1", "write"])
    model.add_policy("p", "p", ["admin", "domain2", "data2", "read"])
    model.add_policy("p", "p", ["admin", "domain2", "data2", "write"])
    model.add_policy("g", "g", ["alice", "admin", "domain1"])
    model.add_policy("g", "g", ["bob", "admin", "domain2"])
    return model
