from pathlib import Path

import pytest

from tests.helpers import FAKE_ARCHIVE_CONTENT, PLATFORM_UUID, write_script


@pytest.fixture
def output_base_dir(tmp_path: Path) -> Path:
    return tmp_path / "sysdiagnose"


@pytest.fixture
def work_dir_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def fake_sysdiagnose(tmp_path: Path) -> Path:
    """Stand-in for sysdiagnose that writes a fixed archive.

    Records its arguments to ``sysdiagnose.args``.
    """
    archive_src = tmp_path / "archive.bin"
    archive_src.write_bytes(FAKE_ARCHIVE_CONTENT)
    args_file = tmp_path / "sysdiagnose.args"
    return write_script(
        tmp_path / "sysdiagnose-fake",
        f"""\
        echo "$@" > "{args_file}"
        out_dir=""
        name=""
        while [ $# -gt 0 ]; do
            case "$1" in
                -f) out_dir="$2"; shift 2 ;;
                -A) name="$2"; shift 2 ;;
                *) shift ;;
            esac
        done
        cat "{archive_src}" > "$out_dir/$name"
        """,
    )


@pytest.fixture
def hanging_sysdiagnose(tmp_path: Path) -> Path:
    """Stand-in for sysdiagnose that never finishes.

    Writes its pid to ``sysdiagnose.pid`` before blocking.
    """
    pid_file = tmp_path / "sysdiagnose.pid"
    return write_script(
        tmp_path / "sysdiagnose-hang",
        f"""\
        echo $$ > "{pid_file}.tmp"
        mv "{pid_file}.tmp" "{pid_file}"
        exec sleep 60
        """,
    )


@pytest.fixture
def fake_ioreg(tmp_path: Path) -> Path:
    return write_script(
        tmp_path / "ioreg",
        f"""\
        cat <<'OUT'
        +-o J314sAP  <class IOPlatformExpertDevice, id 0x100000256, registered>
          {{
            "IOPlatformSerialNumber" = "ABCDE1FGHI"
            "IOPlatformUUID" = "{PLATFORM_UUID}"
          }}
        OUT
        """,
    )
