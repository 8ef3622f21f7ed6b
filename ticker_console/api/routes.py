from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from ticker_console.schemas.device_config import ConfigFieldsUpdate
from ticker_console.schemas.view import TickerSlotEdit
from ticker_console.services.console import DeviceConsole

router = APIRouter()


class RestartRequest(BaseModel):
    confirm: bool = False


def _console(request: Request) -> DeviceConsole:
    console = getattr(request.app.state, "console", None)
    if console is None:
        raise HTTPException(status_code=503, detail='console not started')
    return console


def _outcome(console: DeviceConsole, ok: bool) -> dict:
    notice = console.notifier.current()
    return {'ok': ok, 'message': notice.text if notice else None}


@router.get('/status')
def get_status(request: Request):
    return _console(request).poller.status_view().model_dump()


@router.get('/config')
def get_config(request: Request):
    console = _console(request)
    config = console.store.config
    if config is None:
        raise HTTPException(status_code=503, detail='No config loaded')
    return {
        'config': config.model_dump(by_alias=True, exclude={'tickers', 'num_tickers'}),
        'tickers': console.editor.view().model_dump(),
    }


@router.patch('/config')
def edit_config(update: ConfigFieldsUpdate, request: Request):
    console = _console(request)
    config = console.store.edit(update)
    if config is None:
        raise HTTPException(status_code=503, detail='No config loaded')
    return config.model_dump(by_alias=True, exclude={'tickers', 'num_tickers'})


@router.post('/config/save')
def save_config(request: Request):
    console = _console(request)
    return _outcome(console, console.save())


@router.post('/config/reload')
def reload_config(request: Request):
    console = _console(request)
    return _outcome(console, console.store.load() is not None)


@router.get('/tickers')
def get_tickers(request: Request):
    return _console(request).editor.view().model_dump()


@router.post('/tickers')
def add_ticker(request: Request):
    console = _console(request)
    ok = console.editor.add()
    return {**_outcome(console, ok), 'tickers': console.editor.view().model_dump()}


@router.patch('/tickers/{index}')
def edit_ticker(index: int, edit: TickerSlotEdit, request: Request):
    console = _console(request)
    slot = console.editor.edit_slot(index, edit)
    if slot is None:
        raise HTTPException(status_code=404, detail='ticker slot not found')
    return slot.model_dump()


@router.delete('/tickers/{index}')
def remove_ticker(index: int, request: Request):
    console = _console(request)
    ok = console.editor.remove(index)
    return {**_outcome(console, ok), 'tickers': console.editor.view().model_dump()}


@router.get('/firmware')
def get_firmware_state(request: Request):
    return _console(request).firmware.state().model_dump()


@router.post('/firmware/select')
async def select_firmware(request: Request, firmware: UploadFile | None = File(default=None)):
    console = _console(request)
    filename = firmware.filename if firmware is not None else None
    content = await firmware.read() if firmware is not None else None
    ok = console.firmware.select(filename, content)
    return {**_outcome(console, ok), 'state': console.firmware.state().model_dump()}


@router.post('/firmware/upload')
def upload_firmware(request: Request):
    console = _console(request)
    ok = console.firmware.upload()
    return {**_outcome(console, ok), 'state': console.firmware.state().model_dump()}


@router.post('/device/restart')
def restart_device(req: RestartRequest, request: Request):
    if not req.confirm:
        raise HTTPException(status_code=400, detail='confirm=true required')
    console = _console(request)
    ok = console.restart(confirm=True)
    return {**_outcome(console, ok), 'polling_cancelled': console.poller.cancelled}


@router.get('/notice')
def get_notice(request: Request):
    notice = _console(request).notifier.current()
    return notice.model_dump() if notice else None


@router.get('/metrics')
def console_metrics(request: Request):
    console = _console(request)
    return {
        'config': console.store.metrics(),
        'polling': console.poller.metrics(),
        'notices_shown': console.notifier.shown,
    }
