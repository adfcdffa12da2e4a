from backend.cache.manager import find_server, get_cached_servers, load_servers_cached

from factories import make_server


def test_server_list_is_cached_after_first_fetch():
    calls = []
    servers = [make_server("cas", "Casual Server")]

    def fetch():
        calls.append(1)
        return servers

    assert load_servers_cached(fetch) == servers
    assert load_servers_cached(fetch) == servers
    assert len(calls) == 1
    assert get_cached_servers() == servers


def test_empty_server_list_is_not_cached():
    assert load_servers_cached(lambda: []) == []
    assert get_cached_servers() is None


def test_find_server_by_id_or_name():
    servers = [make_server("cas", "Casual Server"), make_server("exp", "Expert Server")]
    assert find_server(servers, "exp").name == "Expert Server"
    assert find_server(servers, "CASUAL SERVER").id == "cas"
    assert find_server(servers, "training") is None
