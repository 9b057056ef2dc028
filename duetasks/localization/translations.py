"""Message catalogue keyed by locale."""

TRANSLATIONS = {
    "en": {
        "errors.not_authenticated": "Unauthorized",
        "errors.invalid_credentials": "Incorrect email or password",
        "errors.bad_request": "Invalid request body.",
        "errors.resource_not_found": "Resource not found",
        "errors.task_not_found": "Task not found.",
        "errors.attachment_not_found": "Attachment not found.",
        "errors.no_files": "No files provided.",
        "errors.resource_conflict": "Resource already exists",
        "errors.email_taken": "User with this email already exists",
        "errors.seed_not_empty": "Demo tasks can only be added to an empty list.",
        "errors.storage_failed": "Storage operation failed: {detail}",
        "errors.persistence_failed": "Failed to save changes: {detail}",
        "conflict.title": "Time conflict",
        "conflict.description": "You already have {count} task(s) scheduled at {when}.",
        "reminder.title": "Next task starts in {mins} minute(s)",
        "notify.update_failed": "Failed to update task",
        "notify.delete_failed": "Failed to delete task",
        "notify.clear_failed": "Failed to clear completed",
        "notify.in_progress_failed": "Failed to update in-progress",
        "notify.upload_failed": "Upload failed",
        "notify.attachment_remove_failed": "Failed to remove attachment",
    },
    "ru": {
        "errors.not_authenticated": "Требуется авторизация",
        "errors.invalid_credentials": "Неверный email или пароль",
        "errors.bad_request": "Некорректное тело запроса.",
        "errors.resource_not_found": "Ресурс не найден",
        "errors.task_not_found": "Задача не найдена.",
        "errors.attachment_not_found": "Вложение не найдено.",
        "errors.no_files": "Файлы не переданы.",
        "errors.resource_conflict": "Ресурс уже существует",
        "errors.email_taken": "Пользователь с таким email уже существует",
        "errors.seed_not_empty": "Демо-задачи можно добавить только в пустой список.",
        "errors.storage_failed": "Ошибка хранилища: {detail}",
        "errors.persistence_failed": "Не удалось сохранить изменения: {detail}",
        "conflict.title": "Конфликт времени",
        "conflict.description": "На {when} уже запланировано задач: {count}.",
        "reminder.title": "Следующая задача начнётся через {mins} мин.",
        "notify.update_failed": "Не удалось обновить задачу",
        "notify.delete_failed": "Не удалось удалить задачу",
        "notify.clear_failed": "Не удалось очистить выполненные",
        "notify.in_progress_failed": "Не удалось изменить задачу в работе",
        "notify.upload_failed": "Не удалось загрузить файлы",
        "notify.attachment_remove_failed": "Не удалось удалить вложение",
    },
}
