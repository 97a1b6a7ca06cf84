from pathlib import Path
import json

import pytest

from pytsdoc import driver
from pytsdoc.configfile import CURRENT_SCHEMA_URL
from pytsdoc.textrange import TextRange

from pytsdoc.test import CapSys, MonkeyPatch


@pytest.fixture(autouse=True)
def tempDir(tmp_path: Path, monkeypatch: MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path

def write_source(path: Path, text: str) -> Path:
    path.write_text(text, encoding='utf-8')
    return path.resolve()

def geterrtext(capsys: CapSys, *options: str) -> str:
    """
    Run CLI with options and return the output triggered by system exit.
    """
    with pytest.raises(SystemExit) as exc_info:
        driver.main(list(options))
    assert exc_info.value.code == 1
    return capsys.readouterr().err


def test_no_files(capsys: CapSys) -> None:
    assert 'No files given.' in geterrtext(capsys)

def test_invalid_option(capsys: CapSys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        driver.main(['--no-such-option'])
    assert exc_info.value.code == 2
    assert 'unrecognized arguments: --no-such-option' in capsys.readouterr().err

def test_version(capsys: CapSys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        driver.main(['--version'])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.startswith('pytsdoc ')

def test_missing_file(capsys: CapSys, tempDir: Path) -> None:
    err = geterrtext(capsys, 'missing.ts')
    assert f"{tempDir.resolve() / 'missing.ts'}: cannot read file" in err

def test_valid_comment(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', 'const x = 1;\n/** Adds.\n * @param x - The x\n */\n')
    assert driver.main([str(path)]) == 0
    assert capsys.readouterr().out == ''

def test_messages(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', 'const x = 1;\n/** @param x description */\n')
    assert driver.main([str(path)]) == 2
    assert capsys.readouterr().out == (
        f'{path}:2:5: [tsdoc-param-tag-missing-hyphen] The @param block should be followed '
        'by a parameter name and then a hyphen\n')

def test_several_files(capsys: CapSys, tempDir: Path) -> None:
    good = write_source(tempDir / 'good.ts', '/** Fine. */')
    bad = write_source(tempDir / 'bad.ts', '/** @foo */')
    assert driver.main([str(bad), str(good)]) == 2
    out = capsys.readouterr().out
    assert out.startswith(f'{bad}:1:5: [tsdoc-undefined-tag] ')
    assert str(good) not in out

def test_no_comment(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', 'const x = 1;\n// Not a doc comment\n')
    assert driver.main([str(path)]) == 0
    assert capsys.readouterr().out == ''

def test_unclosed_comment(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', '/** Never closed\n')
    assert driver.main([str(path)]) == 2
    assert '[tsdoc-comment-missing-closing-delimiter]' in capsys.readouterr().out

def test_whole_file(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.txt', 'Just some text')
    assert driver.main([str(path)]) == 0
    assert driver.main(['--whole-file', str(path)]) == 2
    assert '[tsdoc-comment-missing-opening-delimiter]' in capsys.readouterr().out

def test_emit(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', 'let a;\n/**   Hello    world\n * @beta */\nlet b;\n')
    assert driver.main(['--emit', str(path)]) == 0
    assert capsys.readouterr().out == '/**\n * Hello world\n *\n * @beta\n */\n'

def test_plain_text(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', '/** Call {@link foo | the foo}.\n * @remarks More. */')
    assert driver.main(['--plain-text', str(path)]) == 0
    assert capsys.readouterr().out == 'Call the foo.\n'

def test_ignore_undefined_tags(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', '/** @foo bar */')
    assert driver.main(['--ignore-undefined-tags', str(path)]) == 0
    assert capsys.readouterr().out == ''

def test_report_unsupported_tags(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', '/** @remarks bar */')
    assert driver.main([str(path)]) == 0
    assert driver.main(['--report-unsupported-tags', str(path)]) == 2
    assert '[tsdoc-unsupported-tag]' in capsys.readouterr().out

def test_tsdoc_config(capsys: CapSys, tempDir: Path) -> None:
    config = {'$schema': CURRENT_SCHEMA_URL,
              'tagDefinitions': [{'tagName': '@myTag', 'syntaxKind': 'modifier'}]}
    (tempDir / 'tsdoc.json').write_text(json.dumps(config), encoding='utf-8')
    path = write_source(tempDir / 'a.ts', '/** Summary.\n * @myTag */')

    assert driver.main([str(path)]) == 2
    assert '[tsdoc-undefined-tag]' in capsys.readouterr().out
    assert driver.main(['--tsdoc-config=tsdoc.json', str(path)]) == 0
    assert capsys.readouterr().out == ''

def test_tsdoc_config_not_found(capsys: CapSys, tempDir: Path) -> None:
    path = write_source(tempDir / 'a.ts', '/** Summary. */')
    err = geterrtext(capsys, '--tsdoc-config=nope.json', str(path))
    assert f"{tempDir.resolve() / 'nope.json'}: file not found." in err

def test_tsdoc_config_invalid(capsys: CapSys, tempDir: Path) -> None:
    (tempDir / 'tsdoc.json').write_text('{"$schema": "x"}', encoding='utf-8')
    path = write_source(tempDir / 'a.ts', '/** Summary. */')
    err = geterrtext(capsys, '--tsdoc-config=tsdoc.json', str(path))
    assert '[tsdoc-config-unsupported-schema]' in err
    assert 'invalid TSDoc configuration.' in err

def test_find_comment_range() -> None:
    text = 'let a;\n/** one */\n/** two */\n'
    text_range = driver.find_comment_range(text)
    assert text_range is not None
    assert str(text_range) == '/** one */'
    assert driver.find_comment_range('no comment') is None

    text_range = driver.find_comment_range('x /** open')
    assert text_range is not None
    assert str(text_range) == '/** open'
    assert str(TextRange.from_string('abc')) == 'abc'
