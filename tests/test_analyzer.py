"""Tests for FormID suspect analysis."""
from unittest.mock import patch

import pytest

from classic_scanner.analyzer import (
    FormIdAnalysisConfig,
    FormIdAnalysisResult,
    FormIdMatch,
    analyze_formids,
    analyze_formids_sync,
    format_formid_analysis,
)
from classic_scanner.formid_db import FormIdDatabase
from classic_scanner.plugins import PluginEntry, PluginList, parse_plugin_list
from classic_scanner.segments import LogSegment, SegmentType


@pytest.fixture
def plugin_list():
    return PluginList(
        plugins={
            '00': PluginEntry('00', 'Fallout4.esm'),
            '01': PluginEntry('01', 'DLCRobot.esm'),
            '0A': PluginEntry('0A', 'SomeMod.esp'),
        },
        light_plugins={'FE:000': PluginEntry('FE:000', 'LightMod.esl', True)},
        total_count=4,
    )


@pytest.fixture
def database(formid_db_path):
    db = FormIdDatabase()
    db.load_database(formid_db_path, 'fallout4')
    yield db
    db.close()


def test_counts_and_order_without_database(plugin_list):
    """Test suspects are counted, resolved and sorted by count."""
    lines = [
        '[ 0] FormID: 0x0A001234',
        '[ 1] FormID: 0x0A001234',
        '[ 2] FormID: 0x0A001234',
        '[ 3] FormID: 0x00000014',
    ]
    result = analyze_formids(lines, plugin_list, FormIdAnalysisConfig(game='fallout4'))

    assert result.matches == [
        FormIdMatch(formid='0A001234', plugin='SomeMod.esp', count=3),
        FormIdMatch(formid='00000014', plugin='Fallout4.esm', count=1),
    ]
    assert not result.database_available


def test_single_base_game_suspect(database):
    """Test a load order line plus one call stack FormID yields a described match."""
    segment = LogSegment(SegmentType.PLUGINS, 0, 0, ['[00]     Fallout4.esm'])
    result = analyze_formids(
        ['FormID: 0x000EAFB6'], parse_plugin_list(segment), FormIdAnalysisConfig(game='fallout4'),
        database=database,
    )

    assert [m.to_dict() for m in result.matches] == [
        {'formId': '000EAFB6', 'plugin': 'Fallout4.esm', 'description': 'GhoulRace', 'count': 1},
    ]


def test_unresolved_index_after_filtering(database):
    lines = ['FormID: 0xFF123456', 'FormID: 0x0A001234', 'FormID: 0xFF000001']
    result = analyze_formids(lines, PluginList(), FormIdAnalysisConfig(game='fallout4'), database=database)

    assert result.matches == [FormIdMatch(formid='0A001234', plugin='Unknown [0A]', count=1)]
    assert 'description' not in result.matches[0].to_dict()


def test_null_formid_counted(plugin_list):
    """Test 00000000 is kept and counted while FF000000 is dropped."""
    lines = ['FormID: 0x00000000', 'FormID: 0xFF000000', 'FormID: 0x00000000']
    result = analyze_formids(lines, plugin_list, FormIdAnalysisConfig(game='fallout4'))

    assert result.matches == [FormIdMatch(formid='00000000', plugin='Fallout4.esm', count=2)]


def test_unknown_plugin_label(plugin_list):
    result = analyze_formids(['FormID: 0x05001234'], plugin_list, FormIdAnalysisConfig(game='fallout4'))
    assert result.matches == [FormIdMatch(formid='05001234', plugin='Unknown [05]', count=1)]


def test_light_plugin_formid_is_unknown(plugin_list, database):
    """Test FE FormIDs are labelled unknown and never looked up."""
    result = analyze_formids(
        ['FormID: 0xFE000800'], plugin_list, FormIdAnalysisConfig(game='fallout4'), database=database
    )
    assert result.matches == [FormIdMatch(formid='FE000800', plugin='Unknown [FE]', count=1)]
    assert database.cache_size == 0


def test_dynamic_formids_excluded(plugin_list):
    lines = ['FormID: 0xFF000001', 'FormID: 0xFF123456', 'FormID: 0x0A001234']
    result = analyze_formids(lines, plugin_list, FormIdAnalysisConfig(game='fallout4'))
    assert [m.formid for m in result.matches] == ['0A001234']


def test_descriptions_from_database(plugin_list, database):
    lines = [
        'FormID: 0x000EAFB6',
        'FormID: 0x0A001234',
        'FormID: 0x0A001234',
        'FormID: 0x0A999999',
    ]
    result = analyze_formids(
        lines, plugin_list, FormIdAnalysisConfig(game='fallout4'), database=database, generator_name='Buffout 4'
    )

    assert result.database_available
    assert result.generator_name == 'Buffout 4'
    assert result.matches == [
        FormIdMatch(formid='0A001234', plugin='SomeMod.esp', count=2, description='ModdedItem'),
        FormIdMatch(formid='000EAFB6', plugin='Fallout4.esm', count=1, description='GhoulRace'),
        FormIdMatch(formid='0A999999', plugin='SomeMod.esp', count=1),
    ]


def test_show_formid_values_disabled(plugin_list, database):
    config = FormIdAnalysisConfig(game='fallout4', show_formid_values=False)
    result = analyze_formids(['FormID: 0x0A001234'], plugin_list, config, database=database)

    assert result.matches[0].description is None
    assert database.cache_size == 0


def test_auto_loads_custom_database(plugin_list, formid_db_path):
    """Test the first existing database path is loaded on demand."""
    config = FormIdAnalysisConfig(game='fallout4', formid_database_paths=[str(formid_db_path)])

    with FormIdDatabase() as db:
        result = analyze_formids(['FormID: 0x0A001234'], plugin_list, config, database=db)

        assert db.has_database('fallout4')
        assert result.database_available
        assert result.matches[0].description == 'ModdedItem'


def test_database_paths_need_a_handle(plugin_list, formid_db_path):
    """Test custom paths are not opened when no database handle is given."""
    config = FormIdAnalysisConfig(game='fallout4', formid_database_paths=[str(formid_db_path)])

    with patch('classic_scanner.analyzer.find_available_databases') as mock_find:
        result = analyze_formids(['FormID: 0x0A001234'], plugin_list, config)
        mock_find.assert_not_called()

    assert not result.database_available
    assert result.matches == [FormIdMatch(formid='0A001234', plugin='SomeMod.esp', count=1)]


def test_no_database_found(plugin_list, tmp_path):
    config = FormIdAnalysisConfig(game='fallout4', formid_database_paths=[str(tmp_path / 'missing.db')])

    with FormIdDatabase() as db:
        result = analyze_formids(['FormID: 0x0A001234'], plugin_list, config, database=db)

        assert not db.has_database('fallout4')
        assert not result.database_available
        assert result.matches == [FormIdMatch(formid='0A001234', plugin='SomeMod.esp', count=1)]


def test_unreadable_database_disables_descriptions(plugin_list, tmp_path):
    bogus = tmp_path / 'broken.db'
    bogus.write_bytes(b'garbage' * 500)
    config = FormIdAnalysisConfig(game='fallout4', formid_database_paths=[str(bogus)])

    with FormIdDatabase() as db:
        result = analyze_formids(['FormID: 0x0A001234'], plugin_list, config, database=db)

    assert not result.database_available
    assert result.matches[0].description is None


def test_disabled_analysis(plugin_list):
    config = FormIdAnalysisConfig(game='fallout4', enabled=False)
    result = analyze_formids(['FormID: 0x0A001234'], plugin_list, config, generator_name='Buffout 4')

    assert result == FormIdAnalysisResult(matches=[], database_available=False)


def test_no_formids_keeps_generator(plugin_list):
    result = analyze_formids(
        ['nothing here', ''], plugin_list, FormIdAnalysisConfig(game='fallout4'), generator_name='Buffout 4'
    )
    assert result.matches == []
    assert not result.database_available
    assert result.generator_name == 'Buffout 4'


def test_ties_keep_first_seen_order(plugin_list):
    lines = ['FormID: 0x01001000', 'FormID: 0x0A001234', 'FormID: 0x00000014']
    result = analyze_formids(lines, plugin_list, FormIdAnalysisConfig(game='fallout4'))
    assert [m.formid for m in result.matches] == ['01001000', '0A001234', '00000014']


def test_counts_sorted_descending(plugin_list):
    lines = ['FormID: 0x00000001'] + ['FormID: 0x00000002'] * 3 + ['FormID: 0x00000003'] * 2
    result = analyze_formids(lines, plugin_list, FormIdAnalysisConfig(game='fallout4'))

    counts = [m.count for m in result.matches]
    assert counts == [3, 2, 1]
    assert counts == sorted(counts, reverse=True)


def test_sync_variant_uses_loaded_database(plugin_list, database):
    result = analyze_formids_sync(
        ['FormID: 0x000EAFB6', 'FormID: 0x000EAFB6'], plugin_list, 'fallout4', database
    )
    assert result.database_available
    assert result.matches == [
        FormIdMatch(formid='000EAFB6', plugin='Fallout4.esm', count=2, description='GhoulRace'),
    ]


def test_sync_variant_never_loads(plugin_list):
    with FormIdDatabase() as db:
        result = analyze_formids_sync(['FormID: 0x000EAFB6'], plugin_list, 'fallout4', db)

        assert not db.has_database('fallout4')
        assert not result.database_available
        assert result.matches[0].description is None

    result = analyze_formids_sync(['FormID: 0x000EAFB6'], plugin_list, 'fallout4', None)
    assert result.matches[0].plugin == 'Fallout4.esm'


def test_to_dict():
    result = FormIdAnalysisResult(
        matches=[
            FormIdMatch(formid='0A001234', plugin='SomeMod.esp', count=3, description='ModdedItem'),
            FormIdMatch(formid='05001234', plugin='Unknown [05]', count=1),
        ],
        database_available=True,
        generator_name='Buffout 4',
    )

    assert result.to_dict() == {
        'matches': [
            {'formId': '0A001234', 'plugin': 'SomeMod.esp', 'count': 3, 'description': 'ModdedItem'},
            {'formId': '05001234', 'plugin': 'Unknown [05]', 'count': 1},
        ],
        'databaseAvailable': True,
        'generatorName': 'Buffout 4',
    }


def test_format_formid_analysis():
    result = FormIdAnalysisResult(
        matches=[
            FormIdMatch(formid='0A001234', plugin='SomeMod.esp', count=3, description='ModdedItem'),
            FormIdMatch(formid='05001234', plugin='Unknown [05]', count=1),
        ],
        generator_name='Buffout 4',
    )
    lines = format_formid_analysis(result)

    assert lines[0] == '- Form ID: 0A001234 | [SomeMod.esp] | ModdedItem | 3'
    assert lines[1] == '- Form ID: 05001234 | [Unknown [05]] | 1'
    assert any('caught by Buffout 4' in line for line in lines)
    assert lines[-1] == ''


def test_format_without_generator():
    lines = format_formid_analysis(FormIdAnalysisResult(matches=[FormIdMatch('00000014', 'Fallout4.esm', 1)]))
    assert not any('caught by' in line for line in lines)


def test_format_no_suspects():
    assert format_formid_analysis(FormIdAnalysisResult()) == ["* COULDN'T FIND ANY FORM ID SUSPECTS *", '']
