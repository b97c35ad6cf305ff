"""Контроллер записей: оркестрация сервисов для каждой входной записи.

SOLID:
- SRP: класс управляет порядком шагов и изоляцией ошибок (без логики обработки изображений).
- DIP: зависит от хоста и сервисов как от ролей; конкретные реализации подставляются полями.
Clean Code:
- Записи обрабатываются строго по одной, в исходном порядке; тяжёлая работа
  кодека уходит в поток, но ожидается до перехода к следующей записи.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional

from compress_image.errors import CompressImageError, TransformError, UnsupportedFormatError
from compress_image.host.base import Host
from compress_image.models.image_model import CompressionResult
from compress_image.models.item_model import Item, ItemFailure, ItemResult, ItemSuccess
from compress_image.models.options_model import CompressOptions
from compress_image.services.input_service import InputService
from compress_image.services.result_service import ResultService
from compress_image.services.size_guard import guard_size
from compress_image.services.transform_service import TransformPipeline

logger = logging.getLogger(__name__)


@dataclass
class ItemProcessor:
    """Прогоняет записи хоста через конвейер сжатия.

    Ответственности:
    - Чтение и проверка параметров записи (`CompressOptions`).
    - Вход → проверка размера → преобразование → сборка результата.
    - Превращение ошибки записи в `ItemFailure` (режим устойчивости) или остановка пакета.
    """
    input_service: InputService = field(default_factory=InputService)
    pipeline: TransformPipeline = field(default_factory=TransformPipeline)
    result_service: ResultService = field(default_factory=ResultService)

    async def iter_results(self, host: Host) -> AsyncIterator[ItemResult]:
        """Отдаёт `ItemResult` по каждой записи в исходном порядке.

        Без режима устойчивости генератор завершается сразу после первой ошибки:
        оставшиеся записи не обрабатываются.
        """
        items = host.get_input_records()
        tolerant = host.continue_on_failure_enabled()
        for index, item in enumerate(items):
            try:
                try:
                    output = await self._process_item(host, index, item)
                except CompressImageError:
                    raise
                except Exception as exc:
                    # сбой вне известных веток всё равно остаётся ошибкой одной записи
                    raise TransformError(f"Image transform failed: {exc.__class__.__name__}") from exc
            except CompressImageError as exc:
                exc.item_index = index
                failure = ItemFailure(
                    index=index,
                    error=exc,
                    item=Item(json={"error": exc.message}, binary=dict(item.binary)),
                )
                if tolerant:
                    logger.warning("item %d failed, continuing: %s", index, exc.message)
                else:
                    logger.error("item %d failed, aborting batch: %s", index, exc.message)
                yield failure
                if not tolerant:
                    return
                continue
            yield ItemSuccess(index=index, item=output)

    async def process(self, host: Host) -> List[Item]:
        """Возвращает выходные записи; без режима устойчивости пробрасывает первую ошибку."""
        outputs: List[Item] = []
        tolerant = host.continue_on_failure_enabled()
        error: Optional[CompressImageError] = None
        async for result in self.iter_results(host):
            if isinstance(result, ItemFailure) and not tolerant:
                # генератор сам завершается после первой ошибки
                error = result.error
                continue
            outputs.append(result.item)
        if error is not None:
            raise error
        return outputs

    def run(self, host: Host) -> List[Item]:
        return asyncio.run(self.process(host))

    # ---- Helpers ----
    async def _process_item(self, host: Host, index: int, item: Item) -> Item:
        options = CompressOptions.from_host(host, index)
        if not self.pipeline.codec.can_encode(options.format):
            raise UnsupportedFormatError(options.format.value)

        image_input = self.input_service.resolve(host, index, item, options)
        guard_size(image_input.size_bytes, options.max_input_size_mb)

        encoded = await asyncio.to_thread(
            self.pipeline.transform, image_input, options.resize, options.encode
        )
        result = self.result_service.assemble(image_input, encoded, options.format)
        logger.info(
            "item %d: %d -> %d bytes (%.1f%%) as %s",
            index,
            result.original_size,
            result.new_size,
            result.percent_reduction,
            result.format.value,
        )
        return self._build_output(host, item, options, result)

    def _build_output(
        self, host: Host, item: Item, options: CompressOptions, result: CompressionResult
    ) -> Item:
        stored = host.store_binary_payload(result.data, result.file_name, result.mime_type)
        data = dict(item.json)
        data["compression"] = result.summary()
        binary = dict(item.binary)
        binary[options.output_binary_property_name] = stored
        return Item(json=data, binary=binary)
