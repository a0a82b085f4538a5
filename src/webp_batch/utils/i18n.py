"""界面文本的多语言目录。

核心逻辑只提供消息标识与数值参数，文本格式化在这里完成。
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from webp_batch.core.exceptions import InvalidConfigurationError


class MessageId(str, Enum):
    APP_TITLE = "app_title"
    FILES = "files"
    FILE_COUNT = "file_count"
    ADD_FILES = "add_files"
    ADD_FOLDER = "add_folder"
    CLEAR_ALL = "clear_all"
    OUTPUT_FOLDER = "output_folder"
    SAME_FOLDER = "same_folder"
    SELECT_FOLDER = "select_folder"
    CHANGE_FOLDER = "change_folder"
    PRESETS = "presets"
    PRESET_LOW = "preset_low"
    PRESET_MEDIUM = "preset_medium"
    PRESET_HIGH = "preset_high"
    PRESET_LOSSLESS = "preset_lossless"
    PRESET_WEB = "preset_web"
    PRESET_PHOTO = "preset_photo"
    PRESET_THUMBNAIL = "preset_thumbnail"
    SETTINGS = "settings"
    QUALITY = "quality"
    COMPRESSION_EFFORT = "compression_effort"
    LOSSLESS_COMPRESSION = "lossless_compression"
    SHOW_ADVANCED = "show_advanced"
    ALPHA_QUALITY = "alpha_quality"
    FILTER_STRENGTH = "filter_strength"
    FILTER_SHARPNESS = "filter_sharpness"
    PREPROCESSING = "preprocessing"
    CONVERT_TO_WEBP = "convert_to_webp"
    CONVERT_FILES = "convert_files"
    FILE_SELECTED = "file_selected"
    FILES_SELECTED = "files_selected"
    ESTIMATE = "estimate"
    DROP_IMAGES = "drop_images"
    SUPPORTED_FORMATS = "supported_formats"
    CONVERSION_COMPLETE = "conversion_complete"
    FILES_CONVERTED = "files_converted"
    SAVED_SPACE = "saved_space"
    FILES_FAILED = "files_failed"
    FILES_REJECTED = "files_rejected"
    OK = "ok"
    CONVERTING = "converting"
    DONE = "done"
    READY_TO_CONVERT = "ready_to_convert"
    DROP_OR_ADD = "drop_or_add"
    SELECT_IMAGES = "select_images"
    PREVIEW_FAILED = "preview_failed"
    EXPORT_REPORT = "export_report"


_EN: Mapping[MessageId, str] = {
    MessageId.APP_TITLE: "WebP Converter",
    MessageId.FILES: "FILES",
    MessageId.FILE_COUNT: "{0} file(s)",
    MessageId.ADD_FILES: "Add Files...",
    MessageId.ADD_FOLDER: "Add Folder...",
    MessageId.CLEAR_ALL: "Clear All",
    MessageId.OUTPUT_FOLDER: "OUTPUT FOLDER",
    MessageId.SAME_FOLDER: "Same folder as source",
    MessageId.SELECT_FOLDER: "Select Folder...",
    MessageId.CHANGE_FOLDER: "Change Folder...",
    MessageId.PRESETS: "PRESETS",
    MessageId.PRESET_LOW: "Low",
    MessageId.PRESET_MEDIUM: "Medium",
    MessageId.PRESET_HIGH: "High",
    MessageId.PRESET_LOSSLESS: "Lossless",
    MessageId.PRESET_WEB: "Web",
    MessageId.PRESET_PHOTO: "Photo",
    MessageId.PRESET_THUMBNAIL: "Thumb",
    MessageId.SETTINGS: "SETTINGS",
    MessageId.QUALITY: "Quality",
    MessageId.COMPRESSION_EFFORT: "Compression effort",
    MessageId.LOSSLESS_COMPRESSION: "Lossless compression",
    MessageId.SHOW_ADVANCED: "Show advanced options",
    MessageId.ALPHA_QUALITY: "Alpha quality",
    MessageId.FILTER_STRENGTH: "Filter strength",
    MessageId.FILTER_SHARPNESS: "Filter sharpness",
    MessageId.PREPROCESSING: "Preprocessing",
    MessageId.CONVERT_TO_WEBP: "Convert to WebP",
    MessageId.CONVERT_FILES: "Convert {0} Files to WebP",
    MessageId.FILE_SELECTED: "1 file selected",
    MessageId.FILES_SELECTED: "{0} files selected",
    MessageId.ESTIMATE: "Est: {0} -> ~{1}",
    MessageId.DROP_IMAGES: "Drop images here",
    MessageId.SUPPORTED_FORMATS: "PNG, JPEG, BMP, GIF",
    MessageId.CONVERSION_COMPLETE: "Conversion Complete!",
    MessageId.FILES_CONVERTED: "{0} of {1} files converted successfully",
    MessageId.SAVED_SPACE: "Saved {0}% space",
    MessageId.FILES_FAILED: "{0} file(s) failed",
    MessageId.FILES_REJECTED: "{0} file(s) not added: list is full",
    MessageId.OK: "OK",
    MessageId.CONVERTING: "Converting {0}/{1}: {2}",
    MessageId.DONE: "Done! {0} converted, {1} failed",
    MessageId.READY_TO_CONVERT: "{0} file(s) ready to convert",
    MessageId.DROP_OR_ADD: "Drop images or click 'Add Files' to start",
    MessageId.SELECT_IMAGES: "Select Images",
    MessageId.PREVIEW_FAILED: "Could not load {0}",
    MessageId.EXPORT_REPORT: "Export Report...",
}

_FR: Mapping[MessageId, str] = {
    MessageId.APP_TITLE: "Convertisseur WebP",
    MessageId.FILES: "FICHIERS",
    MessageId.FILE_COUNT: "{0} fichier(s)",
    MessageId.ADD_FILES: "Ajouter...",
    MessageId.ADD_FOLDER: "Ajouter dossier...",
    MessageId.CLEAR_ALL: "Tout effacer",
    MessageId.OUTPUT_FOLDER: "DOSSIER DE SORTIE",
    MessageId.SAME_FOLDER: "Meme dossier que source",
    MessageId.SELECT_FOLDER: "Choisir dossier...",
    MessageId.CHANGE_FOLDER: "Changer dossier...",
    MessageId.PRESETS: "PRESELECTIONS",
    MessageId.PRESET_LOW: "Basse",
    MessageId.PRESET_MEDIUM: "Moyenne",
    MessageId.PRESET_HIGH: "Haute",
    MessageId.PRESET_LOSSLESS: "Sans perte",
    MessageId.PRESET_WEB: "Web",
    MessageId.PRESET_PHOTO: "Photo",
    MessageId.PRESET_THUMBNAIL: "Mini",
    MessageId.SETTINGS: "PARAMETRES",
    MessageId.QUALITY: "Qualite",
    MessageId.COMPRESSION_EFFORT: "Effort de compression",
    MessageId.LOSSLESS_COMPRESSION: "Compression sans perte",
    MessageId.SHOW_ADVANCED: "Options avancees",
    MessageId.ALPHA_QUALITY: "Qualite alpha",
    MessageId.FILTER_STRENGTH: "Force du filtre",
    MessageId.FILTER_SHARPNESS: "Nettete du filtre",
    MessageId.PREPROCESSING: "Pretraitement",
    MessageId.CONVERT_TO_WEBP: "Convertir en WebP",
    MessageId.CONVERT_FILES: "Convertir {0} fichiers",
    MessageId.FILE_SELECTED: "1 fichier selectionne",
    MessageId.FILES_SELECTED: "{0} fichiers selectionnes",
    MessageId.ESTIMATE: "Est: {0} -> ~{1}",
    MessageId.DROP_IMAGES: "Deposez vos images ici",
    MessageId.SUPPORTED_FORMATS: "PNG, JPEG, BMP, GIF",
    MessageId.CONVERSION_COMPLETE: "Conversion terminee !",
    MessageId.FILES_CONVERTED: "{0} sur {1} fichiers convertis",
    MessageId.SAVED_SPACE: "{0}% d'espace economise",
    MessageId.FILES_FAILED: "{0} fichier(s) echoue(s)",
    MessageId.FILES_REJECTED: "{0} fichier(s) non ajoute(s) : liste pleine",
    MessageId.OK: "OK",
    MessageId.CONVERTING: "Conversion {0}/{1}: {2}",
    MessageId.DONE: "Termine ! {0} converti(s), {1} echoue(s)",
    MessageId.READY_TO_CONVERT: "{0} fichier(s) pret(s)",
    MessageId.DROP_OR_ADD: "Deposez des images ou cliquez 'Ajouter'",
    MessageId.SELECT_IMAGES: "Choisir des images",
    MessageId.PREVIEW_FAILED: "Impossible de charger {0}",
    MessageId.EXPORT_REPORT: "Exporter le rapport...",
}

_ZH: Mapping[MessageId, str] = {
    MessageId.APP_TITLE: "WebP 转换器",
    MessageId.FILES: "文件",
    MessageId.FILE_COUNT: "{0} 个文件",
    MessageId.ADD_FILES: "添加文件...",
    MessageId.ADD_FOLDER: "添加目录...",
    MessageId.CLEAR_ALL: "全部清空",
    MessageId.OUTPUT_FOLDER: "输出目录",
    MessageId.SAME_FOLDER: "与源文件相同目录",
    MessageId.SELECT_FOLDER: "选择目录...",
    MessageId.CHANGE_FOLDER: "更改目录...",
    MessageId.PRESETS: "预设",
    MessageId.PRESET_LOW: "低",
    MessageId.PRESET_MEDIUM: "中",
    MessageId.PRESET_HIGH: "高",
    MessageId.PRESET_LOSSLESS: "无损",
    MessageId.PRESET_WEB: "网页",
    MessageId.PRESET_PHOTO: "照片",
    MessageId.PRESET_THUMBNAIL: "缩略图",
    MessageId.SETTINGS: "参数",
    MessageId.QUALITY: "质量",
    MessageId.COMPRESSION_EFFORT: "压缩力度",
    MessageId.LOSSLESS_COMPRESSION: "无损压缩",
    MessageId.SHOW_ADVANCED: "显示高级选项",
    MessageId.ALPHA_QUALITY: "Alpha 质量",
    MessageId.FILTER_STRENGTH: "滤波强度",
    MessageId.FILTER_SHARPNESS: "滤波锐度",
    MessageId.PREPROCESSING: "预处理",
    MessageId.CONVERT_TO_WEBP: "转换为 WebP",
    MessageId.CONVERT_FILES: "转换 {0} 个文件为 WebP",
    MessageId.FILE_SELECTED: "已选择 1 个文件",
    MessageId.FILES_SELECTED: "已选择 {0} 个文件",
    MessageId.ESTIMATE: "预估: {0} -> ~{1}",
    MessageId.DROP_IMAGES: "拖入图片",
    MessageId.SUPPORTED_FORMATS: "PNG, JPEG, BMP, GIF",
    MessageId.CONVERSION_COMPLETE: "转换完成！",
    MessageId.FILES_CONVERTED: "{1} 个文件中 {0} 个转换成功",
    MessageId.SAVED_SPACE: "节省 {0}% 空间",
    MessageId.FILES_FAILED: "{0} 个文件失败",
    MessageId.FILES_REJECTED: "列表已满，{0} 个文件未添加",
    MessageId.OK: "确定",
    MessageId.CONVERTING: "正在转换 {0}/{1}: {2}",
    MessageId.DONE: "完成！成功 {0} 个，失败 {1} 个",
    MessageId.READY_TO_CONVERT: "{0} 个文件待转换",
    MessageId.DROP_OR_ADD: "拖入图片或点击“添加文件”开始",
    MessageId.SELECT_IMAGES: "选择图片",
    MessageId.PREVIEW_FAILED: "无法加载 {0}",
    MessageId.EXPORT_REPORT: "导出报告...",
}

CATALOGS: Mapping[str, Mapping[MessageId, str]] = {"en": _EN, "fr": _FR, "zh": _ZH}
LANGUAGE_NAMES: Mapping[str, str] = {"en": "EN", "fr": "FR", "zh": "中文"}


class Localizer:
    """持有当前语言的文本查找器，由调用方显式创建与传递。"""

    def __init__(self, language: str = "en") -> None:
        self._language = "en"
        self.set_language(language)

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, language: str) -> None:
        if language not in CATALOGS:
            raise InvalidConfigurationError(f"不支持的语言: {language}")
        self._language = language

    def text(self, message_id: MessageId, *args: Any) -> str:
        template = CATALOGS[self._language].get(message_id) or _EN[message_id]
        return template.format(*args) if args else template


def format_size(num_bytes: int) -> str:
    """格式化字节数：小于 1 KB 显示 B，小于 1 MB 显示 KB（1 位小数），否则 MB（2 位小数）。"""

    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024.0:.1f} KB"
    return f"{num_bytes / (1024.0 * 1024.0):.2f} MB"
