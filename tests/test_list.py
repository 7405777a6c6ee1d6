import pytest

from ini_settings import (
    EmptyOrUnreadableError,
    IniField,
    IniRecord,
    IniSettings,
    ini_section,
)


@ini_section("Server")
class ServerCfg(IniRecord):
    host: str = IniField("localhost", key="Host")
    port: int = IniField(80, key="Port")
    secure: bool = IniField(False, key="Secure")


@pytest.mark.asyncio
async def test_read_list_stops_at_first_gap(tmp_path):
    path = tmp_path / "servers.ini"
    path.write_text(
        "[Server1]\nHost=a\nPort=1\n\n"
        "[Server2]\nHost=b\nPort=2\n\n"
        "[Server4]\nHost=d\nPort=4\n"
    )
    settings = await IniSettings.create(path)

    servers = await settings.read_list(ServerCfg)

    assert [s.host for s in servers] == ["a", "b"]
    assert [s.port for s in servers] == [1, 2]


@pytest.mark.asyncio
async def test_read_list_empty_file(tmp_path):
    settings = await IniSettings.create(tmp_path / "servers.ini")
    assert await settings.read_list(ServerCfg) == []


@pytest.mark.asyncio
async def test_read_list_header_without_keys_ends_list(tmp_path):
    path = tmp_path / "servers.ini"
    path.write_text("[Server1]\n[Server2]\nHost=b\n")
    settings = await IniSettings.create(path)
    assert await settings.read_list(ServerCfg) == []


@pytest.mark.asyncio
async def test_read_list_unreadable_file(tmp_path):
    path = tmp_path / "servers.ini"
    settings = await IniSettings.create(path)
    path.write_text("garbage line\n")
    with pytest.raises(EmptyOrUnreadableError):
        await settings.read_list(ServerCfg)


@pytest.mark.asyncio
async def test_write_list_layout_and_round_trip(tmp_path):
    path = tmp_path / "servers.ini"
    settings = await IniSettings.create(path)
    servers = [ServerCfg(host="a", port=1), ServerCfg(host="b", port=2, secure=True)]

    await settings.write_list(servers)

    assert path.read_text() == (
        "[Server1]\nHost=a\nPort=1\nSecure=false\n\n"
        "[Server2]\nHost=b\nPort=2\nSecure=true\n\n"
    )
    await settings.reload()
    assert await settings.read_list(ServerCfg) == servers


@pytest.mark.asyncio
async def test_write_list_appends_to_existing_content(tmp_path):
    path = tmp_path / "servers.ini"
    settings = await IniSettings.create(path)
    path.write_text("[General]\nName=demo")

    await settings.write_list([ServerCfg(host="a")])

    assert path.read_text() == "[General]\nName=demo\n[Server1]\nHost=a\nPort=80\nSecure=false\n\n"
    assert settings.backup_path.read_text() == "[General]\nName=demo"


@pytest.mark.asyncio
async def test_write_list_needs_type_for_empty_list(tmp_path):
    settings = await IniSettings.create(tmp_path / "servers.ini")
    with pytest.raises(ValueError):
        await settings.write_list([])
    await settings.write_list([], ServerCfg)
    assert (tmp_path / "servers.ini").read_text() == ""
