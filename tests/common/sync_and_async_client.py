import inspect
from typing import Any


class SyncAndAsyncClient:
    client: Any
    async_call: bool

    async def _execute_method(self, **kwargs):
        caller_frame = inspect.stack()[1]
        method_name = caller_frame.function
        client_method_name = (
            f"a{method_name}" if self.async_call else method_name
        )
        method = getattr(
            self.client,
            client_method_name,
        )
        if self.async_call:
            return await method(**kwargs)
        return method(**kwargs)


class QuerySyncAndAsyncClient(SyncAndAsyncClient):
    def __init__(self, query: Any, async_call: bool):
        self.client = query
        self.async_call = async_call

    async def search(self):
        return await self._execute_method()

    async def count(self):
        return await self._execute_method()

    async def remove(self):
        return await self._execute_method()

    async def autocomplete(self, term: str):
        return await self._execute_method(term=term)

    async def by_id(self, id: Any):
        return await self._execute_method(id=id)

    async def aggregations(self):
        return await self._execute_method()

    async def exec(self):
        return await self._execute_method()


class ElastoSyncAndAsyncClient(SyncAndAsyncClient):
    def __init__(self, client: Any, async_call: bool):
        self.client = client
        self.async_call = async_call

    async def save(self, **kwargs):
        return await self._execute_method(**kwargs)
