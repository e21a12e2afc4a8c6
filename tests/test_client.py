import os
import sys
from unittest import mock

import pytest

sys.path.append(os.getcwd().split('/tests')[0])

from rwconcern import (ConcernClient, CommandRecorder, PyMongoTransport, ReadConcern,
                       ReadConcernLevel, WriteConcern, collection, database, errors, uri)


def setup_client(**kwargs):
    recorder = CommandRecorder(kwargs.pop('replies', None))
    client = ConcernClient(transport=recorder, **kwargs)
    return client, recorder


def test_client_read_concern():
    client1, _ = setup_client()
    assert client1.read_concern.level is None

    db1 = client1.get_database('test')
    assert db1.read_concern.level is None

    db2 = client1.get_database('test', read_concern=ReadConcern(ReadConcernLevel.MAJORITY))
    assert db2.read_concern.level == 'majority'

    # although local is the default, if it is explicitly provided it should be set
    client2, _ = setup_client(read_concern=ReadConcern('local'))
    assert client2.read_concern.level == 'local'
    assert client2.get_database('test').read_concern.level == 'local'
    assert client2.test.read_concern.level == 'local'
    db4 = client2.get_database('test', read_concern=ReadConcern('majority'))
    assert db4.read_concern.level == 'majority'

    # override a non-default with an unset one
    client3, _ = setup_client(read_concern=ReadConcern('majority'))
    db5 = client3.get_database('test', read_concern=ReadConcern())
    assert db5.read_concern.level is None


def test_client_write_concern():
    client1, _ = setup_client()
    assert client1.write_concern.is_server_default
    assert client1.get_database('test').write_concern.is_server_default
    db2 = client1.get_database('test', write_concern=WriteConcern(w=2))
    assert db2.write_concern.w == 2

    client2, _ = setup_client(write_concern=WriteConcern(w=1))
    assert client2.write_concern.w == 1
    db3 = client2.get_database('test')
    assert not db3.write_concern.is_server_default
    assert db3.write_concern.w == 1
    db4 = client2.get_database('test', write_concern=WriteConcern(w=2))
    assert db4.write_concern.w == 2

    client3, _ = setup_client(write_concern=WriteConcern(w=2))
    db5 = client3.get_database('test', write_concern=WriteConcern())
    assert db5.write_concern.is_server_default


def test_database_read_concern():
    client, recorder = setup_client()
    db1 = client.get_database('test')

    coll1 = db1.create_collection('coll1')
    assert coll1.read_concern.level is None
    assert recorder.last() == {'create': 'coll1'}
    coll1 = db1.get_collection('coll1')
    assert coll1.read_concern.level is None

    coll2 = db1.create_collection('coll2', read_concern=ReadConcern('local'))
    assert coll2.read_concern.level == 'local'
    coll2 = db1.get_collection('coll2', read_concern=ReadConcern('local'))
    assert coll2.read_concern.level == 'local'

    db2 = client.get_database('test', read_concern=ReadConcern('local'))
    coll3 = db2.create_collection('coll3')
    assert coll3.read_concern.level == 'local'
    assert db2.coll3.read_concern.level == 'local'
    coll4 = db2.create_collection('coll4', read_concern=ReadConcern('majority'))
    assert coll4.read_concern.level == 'majority'
    coll4 = db2.get_collection('coll4', read_concern=ReadConcern('majority'))
    assert coll4.read_concern.level == 'majority'


def test_database_write_concern():
    client, recorder = setup_client()
    db1 = client.get_database('test')

    coll1 = db1.create_collection('coll1')
    assert coll1.write_concern.is_server_default
    coll2 = db1.create_collection('coll2', write_concern=WriteConcern(w=1))
    assert coll2.write_concern.w == 1
    assert recorder.last() == {'create': 'coll2', 'writeConcern': {'w': 1}}

    db2 = client.get_database('test', write_concern=WriteConcern(w=1))
    coll3 = db2.create_collection('coll3')
    assert coll3.write_concern.w == 1
    # the database's concern applies to the create command contextually
    assert recorder.last() == {'create': 'coll3', 'writeConcern': {'w': 1}}
    coll4 = db2.create_collection('coll4', write_concern=WriteConcern(w=2))
    assert coll4.write_concern.w == 2
    assert recorder.last() == {'create': 'coll4', 'writeConcern': {'w': 2}}
    coll4 = db2.get_collection('coll4', write_concern=WriteConcern(w=2))
    assert coll4.write_concern.w == 2


def test_inheritance_scenario():
    client, _ = setup_client(write_concern=WriteConcern(w=1))
    db = client.get_database('test')
    assert not db.write_concern.is_server_default
    assert db.write_concern.w == 1
    coll = db.create_collection('coll', write_concern=WriteConcern(w=2))
    assert coll.write_concern.w == 2


def test_snapshots_are_independent():
    client, _ = setup_client(read_concern=ReadConcern('local'))
    db = client.test
    coll = db.coll
    with pytest.raises(AttributeError):
        client.read_concern = ReadConcern('majority')
    db_majority = db.with_options(read_concern=ReadConcern('majority'))
    assert db_majority.read_concern.level == 'majority'
    assert db.read_concern.level == 'local'
    assert coll.read_concern.level == 'local'
    assert db_majority.coll.read_concern.level == 'majority'
    coll2 = coll.with_options(write_concern=WriteConcern(w=3))
    assert coll2.write_concern.w == 3
    assert coll2.read_concern.level == 'local'
    assert coll.write_concern.is_server_default
    assert coll2 == coll


def test_operation_read_concerns():
    client, recorder = setup_client()
    db = client.test
    coll = db.create_collection('coll1')
    command = {'count': 'coll1'}

    db.command(command, read_concern=ReadConcern('local'))
    assert recorder.last() == {'count': 'coll1', 'readConcern': {'level': 'local'}}

    db.command(command, read_concern=ReadConcern())
    assert recorder.last() == {'count': 'coll1'}

    recorder.clear()
    with pytest.raises(errors.ValidationError):
        db.command(command, read_concern=ReadConcern('blah'))
    assert recorder.started == []

    coll.find(read_concern=ReadConcern('local'))
    assert recorder.last() == {'find': 'coll1', 'filter': {},
                               'readConcern': {'level': 'local'}}
    coll.aggregate([{'$project': {'a': 1}}], read_concern=ReadConcern('majority'))
    assert recorder.last() == {'aggregate': 'coll1', 'pipeline': [{'$project': {'a': 1}}],
                               'cursor': {}, 'readConcern': {'level': 'majority'}}
    coll.count_documents({}, read_concern=ReadConcern('majority'))
    assert recorder.last()['readConcern'] == {'level': 'majority'}
    coll.distinct('a', read_concern=ReadConcern('local'))
    assert recorder.last() == {'distinct': 'coll1', 'key': 'a', 'query': {},
                               'readConcern': {'level': 'local'}}
    coll.find_one({'a': 1})
    assert 'readConcern' not in recorder.last()


def test_inherited_read_concern_on_operations():
    client, recorder = setup_client()
    db = client.get_database('test', read_concern=ReadConcern('majority'))
    coll = db.coll

    coll.find({})
    assert recorder.last()['readConcern'] == {'level': 'majority'}
    coll.find({}, read_concern=ReadConcern('local'))
    assert recorder.last()['readConcern'] == {'level': 'local'}
    # an explicit empty concern forces the server default
    coll.find({}, read_concern=ReadConcern())
    assert recorder.last()['readConcern'] == {}
    # generic commands only carry what they are given
    db.command({'count': 'coll'})
    assert recorder.last() == {'count': 'coll'}


def test_operation_write_concerns():
    client, recorder = setup_client(write_concern=WriteConcern(w=1))
    coll = client.test.coll

    coll.insert_one({'_id': 1, 'a': 1})
    assert recorder.last() == {'insert': 'coll', 'documents': [{'_id': 1, 'a': 1}],
                               'writeConcern': {'w': 1}}
    coll.insert_one({'_id': 2}, write_concern=WriteConcern(w=2))
    assert recorder.last()['writeConcern'] == {'w': 2}
    coll.update_one({'_id': 1}, {'$set': {'a': 2}}, write_concern=WriteConcern())
    assert recorder.last()['writeConcern'] == {}
    coll.delete_many({}, write_concern=WriteConcern(tag='majority', wtimeout_ms=100))
    assert recorder.last() == {'delete': 'coll', 'deletes': [{'q': {}, 'limit': 0}],
                               'writeConcern': {'w': 'majority', 'wtimeout': 100}}
    coll.aggregate([{'$match': {}}, {'$out': 'other'}], write_concern=WriteConcern(w=2))
    assert recorder.last()['writeConcern'] == {'w': 2}
    coll.aggregate([{'$match': {}}], write_concern=WriteConcern(w=2))
    assert 'writeConcern' not in recorder.last()
    coll.drop()
    assert recorder.last() == {'drop': 'coll', 'writeConcern': {'w': 1}}

    client2, recorder2 = setup_client()
    client2.test.coll.insert_many([{'_id': 1}, {'_id': 2}], ordered=False)
    assert recorder2.last() == {'insert': 'coll', 'documents': [{'_id': 1}, {'_id': 2}],
                                'ordered': False}
    client2.drop_database('test', write_concern=WriteConcern(journal=True))
    assert recorder2.last() == {'dropDatabase': 1, 'writeConcern': {'j': True}}
    client2.test.drop_collection('coll', write_concern=WriteConcern(w=1))
    assert recorder2.last() == {'drop': 'coll', 'writeConcern': {'w': 1}}


def test_results():
    replies = {'update': {'n': 1, 'nModified': 1, 'ok': 1.0},
               'delete': {'n': 4, 'ok': 1.0},
               'count': {'n': 3, 'ok': 1.0},
               'distinct': {'values': [1, 2], 'ok': 1.0},
               'find': {'cursor': {'firstBatch': [{'_id': 1}, {'_id': 2}]}, 'ok': 1.0}}
    client, _ = setup_client(replies=replies)
    coll = client.test.coll

    ior = coll.insert_one({'a': 1})
    assert ior.acknowledged
    assert ior.inserted_id is not None
    imr = coll.insert_many([{'_id': 'x'}, {'_id': 'y'}])
    assert imr.inserted_ids == ['x', 'y']
    ur = coll.update_many({}, {'$set': {'a': 2}})
    assert ur.matched_count == 1
    assert ur.modified_count == 1
    assert ur.upserted_id is None
    assert coll.delete_one({}).deleted_count == 4
    assert coll.count_documents({}) == 3
    assert coll.distinct('a') == [1, 2]
    assert [d['_id'] for d in coll.find()] == [1, 2]
    assert coll.find_one() == {'_id': 1}

    ur = coll.update_one({}, {'$set': {'a': 2}}, write_concern=WriteConcern(w=0))
    assert not ur.acknowledged
    with pytest.raises(errors.InvalidOperation):
        ur.matched_count
    dr = coll.delete_one({}, write_concern=WriteConcern(w=0))
    with pytest.raises(errors.InvalidOperation):
        dr.deleted_count
    assert not coll.insert_one({'a': 1}, write_concern=WriteConcern(w=0)).acknowledged


def test_unacknowledged_collection():
    client, _ = setup_client(write_concern=WriteConcern(w=0))
    coll = client.test.coll
    assert not coll.insert_one({}).acknowledged
    assert coll.insert_one({}, write_concern=WriteConcern(w=1)).acknowledged


def test_operation_failure():
    client, _ = setup_client(replies={'create': {'ok': 0.0, 'errmsg': 'exists', 'code': 48}})
    with pytest.raises(errors.OperationFailure) as exc:
        client.test.create_collection('coll')
    assert exc.value.code == 48


def test_connection_string_and_kwargs():
    client = ConcernClient('mongodb://localhost/?w=1&readConcernLevel=local')
    assert client.write_concern.w == 1
    assert client.read_concern.level == 'local'
    assert isinstance(client.transport, CommandRecorder)

    client = ConcernClient('mongodb://localhost/?w=1', write_concern=WriteConcern(w=2),
                           read_concern=ReadConcern())
    assert client.write_concern.w == 2
    assert client.read_concern.is_server_default

    with pytest.raises(errors.ValidationError):
        ConcernClient('mongodb://localhost/?readConcernLevel=blah')
    with pytest.raises(errors.ValidationError):
        ConcernClient('notmongo://localhost')
    with pytest.raises(errors.ValidationError):
        ConcernClient(read_concern='majority')
    with pytest.raises(errors.ValidationError):
        ConcernClient(write_concern={'w': 1})
    client, _ = setup_client()
    with pytest.raises(errors.ValidationError):
        client.get_database('test', read_concern='local')
    with pytest.raises(errors.ValidationError):
        client.test.get_collection('coll', write_concern=1)


def test_connection_string_option_case():
    client = ConcernClient('mongodb://localhost/?w=2&wtimeoutMS=500')
    assert client.write_concern.w == 2
    assert client.write_concern.wtimeout_ms == 500

    client = ConcernClient('mongodb://localhost/?w=majority&journal=true'
                           '&WTIMEOUTMS=20&readconcernlevel=majority')
    assert client.write_concern == WriteConcern(tag='majority', journal=True,
                                                wtimeout_ms=20)
    assert client.read_concern.level == 'majority'


def test_options_spelled_any_way():
    # pymongo's parsed options may be a plain dict with its own spelling
    read_concern, write_concern = uri.concerns_from_options(
        {'w': 3, 'wTimeoutMS': 7, 'journal': False, 'readConcernLevel': 'local'})
    assert write_concern == WriteConcern(w=3, journal=False, wtimeout_ms=7)
    assert read_concern == ReadConcern('local')
    read_concern, write_concern = uri.concerns_from_options({})
    assert read_concern.is_server_default
    assert write_concern.is_server_default


def test_names_and_attrs():
    client, _ = setup_client()
    assert isinstance(client.db, database.Database)
    assert client.db is client['db']
    db = client.db
    client.close()
    assert client.db is not db
    assert client.db == db
    assert isinstance(client.db.coll, collection.Collection)
    assert client.db.coll.sub.full_name == 'db.coll.sub'
    with pytest.raises(errors.InvalidName):
        client.get_database('bad.name')
    with pytest.raises(errors.InvalidName):
        client.db.get_collection('bad$name')
    with pytest.raises(errors.ConcernNotImplementedError):
        client.start_session
    with pytest.raises(errors.ConcernNotImplementedError):
        client.db.watch
    with pytest.raises(errors.ConcernNotImplementedError):
        client.db.coll.bulk_write
    with pytest.raises(errors.ConcernNotImplementedError):
        client.db.coll.insert
    with pytest.raises(errors.ConcernError):
        client.db.coll.find({}, session=None)
    with pytest.raises(errors.ConcernError):
        client.db.coll.find('not a filter')


def test_list_names():
    replies = {'listDatabases': {'databases': [{'name': 'a'}, {'name': 'b'}], 'ok': 1},
               'listCollections': {'cursor': {'firstBatch': [{'name': 'c'}]}, 'ok': 1}}
    client, recorder = setup_client(replies=replies)
    assert client.list_database_names() == ['a', 'b']
    assert recorder.started[-1].database_name == 'admin'
    assert client.db.list_collection_names() == ['c']
    assert recorder.started[-1].command_name == 'listCollections'


def test_pymongo_transport():
    mongo_client = mock.MagicMock()
    mongo_client.__getitem__.return_value.command.return_value = {'ok': 1.0, 'n': 7}
    client = ConcernClient(transport=PyMongoTransport(mongo_client),
                           read_concern=ReadConcern('majority'))
    assert client.test.coll.count_documents({}) == 7
    mongo_client.__getitem__.assert_called_with('test')
    sent = mongo_client.__getitem__.return_value.command.call_args[0][0]
    assert sent == {'count': 'coll', 'query': {}, 'readConcern': {'level': 'majority'}}


def test_cursor_iterates_batch_once():
    docs = [{'_id': i} for i in range(1000)]
    replies = {'find': {'cursor': {'firstBatch': docs, 'id': 0}, 'ok': 1}}
    client, _ = setup_client(replies=replies)
    cursor = client.db.coll.find({})
    assert iter(cursor) is cursor
    assert next(cursor) == {'_id': 0}
    assert [doc['_id'] for doc in cursor] == list(range(1, 1000))
    assert list(cursor) == []
    assert cursor.reply['cursor']['firstBatch'] == docs
