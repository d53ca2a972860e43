from ethapi.rpc.base import MethodGroup, MethodGroupName


class Db(MethodGroup):
    name = MethodGroupName.DB
    OPERATIONS = ('get_hex', 'put_hex')

    async def get_hex(self, db_name: str, key: str) -> str:
        return await self._execute('getHex', db_name, key)

    async def put_hex(self, db_name: str, key: str, value: str) -> bool:
        return await self._execute('putHex', db_name, key, value)
