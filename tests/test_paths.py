"""
Tests for path templating, route tables and bracketed form keys.
"""

from tracespec.capture.params import bracket_key, flatten_keys, nest_params, split_key
from tracespec.capture.paths import RouteTable, normalize_path, path_bindings


class TestNormalizePath:
    """Test suite for normalize_path()."""

    def test_templates_bound_values(self):
        result = normalize_path('/orgs/42/users/7', {'org_id': 42, 'user_id': 7})

        assert result == '/orgs/{org_id}/users/{user_id}'

    def test_no_bindings_returns_path(self):
        assert normalize_path('/users', {}) == '/users'

    def test_routing_keys_excluded(self):
        result = normalize_path(
            '/users/7', {'controller': 'users', 'action': 'show', 'format': 'json', 'id': '7'}
        )

        assert result == '/users/{id}'

    def test_repeated_value_replaced_everywhere(self):
        """A value appearing in an unrelated segment is replaced too."""
        assert normalize_path('/items/1/v1', {'id': '1'}) == '/items/{id}/v{id}'

    def test_bindings_applied_in_order(self):
        result = normalize_path('/a/12/b/1', {'x': '12', 'y': '1'})

        assert result == '/a/{x}/b/{y}'

    def test_path_bindings_keeps_order(self):
        bindings = path_bindings({'b': 1, 'controller': 'x', 'a': 2})
        assert list(bindings) == ['b', 'a']


class TestRouteTable:
    """Test suite for RouteTable matching."""

    def test_match_extracts_bindings(self):
        routes = RouteTable(['/orgs/{org_id}/users/{user_id}'])

        template, bindings = routes.match('/orgs/42/users/7')

        assert template == '/orgs/{org_id}/users/{user_id}'
        assert bindings == {'org_id': '42', 'user_id': '7'}

    def test_first_match_wins(self):
        routes = RouteTable(['/users/me', '/users/{id}'])

        assert routes.match('/users/me') == ('/users/me', {})
        assert routes.match('/users/3') == ('/users/{id}', {'id': '3'})

    def test_no_match(self):
        routes = RouteTable(['/users/{id}'])

        assert routes.match('/orders/3') is None
        assert routes.match('/users/3/extra') is None
        assert routes.bindings_for('/orders/3') == {}

    def test_resource_for_template(self):
        routes = RouteTable(['/orgs/{org_id}/users/{user_id}'])
        assert routes.resource_for('/orgs/1/users/2') == 'users'

    def test_resource_for_unmatched_path_skips_ids(self):
        assert RouteTable().resource_for('/api/orders/15') == 'orders'
        assert RouteTable().resource_for('/') == 'root'

    def test_normalize_with_route_bindings(self):
        routes = RouteTable(['/orgs/{org_id}/users/{user_id}'])
        path = '/orgs/42/users/7'

        assert normalize_path(path, routes.bindings_for(path)) == '/orgs/{org_id}/users/{user_id}'


class TestBracketedKeys:
    """Test suite for nest_params() and flatten_keys()."""

    def test_split_key(self):
        assert split_key('name') == ['name']
        assert split_key('user[address][city]') == ['user', 'address', 'city']
        assert split_key('tags[]') == ['tags', '']

    def test_nest_params(self):
        result = nest_params([
            ('user[name]', 'Ann'),
            ('user[address][city]', 'Oslo'),
            ('page', '2'),
        ])

        assert result == {'user': {'name': 'Ann', 'address': {'city': 'Oslo'}}, 'page': '2'}

    def test_nest_params_lists(self):
        result = nest_params([('tags[]', 'a'), ('tags[]', 'b'), ('user[roles][]', 'admin')])

        assert result == {'tags': ['a', 'b'], 'user': {'roles': ['admin']}}

    def test_repeated_plain_key_keeps_last(self):
        assert nest_params([('a', '1'), ('a', '2')]) == {'a': '2'}

    def test_flatten_keys_depth_first(self):
        pairs = flatten_keys({'a': {'b': {'c': 1}, 'e': 3}, 'd': 2})

        assert pairs == [('a[b][c]', 1), ('a[e]', 3), ('d', 2)]

    def test_flatten_keeps_lists_as_leaves(self):
        assert flatten_keys({'user': {'roles': ['x']}}) == [('user[roles]', ['x'])]

    def test_bracket_key(self):
        assert bracket_key(['a', 'b', 'c']) == 'a[b][c]'
        assert bracket_key(['a']) == 'a'
