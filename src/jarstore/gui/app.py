#!/usr/bin/env python3
"""
DRAGE Java Apps - Qt store window.

Renders a :class:`~jarstore.store_view.StoreView` and forwards button
clicks to the store service. Network and filesystem work runs on
``QThread`` workers; their signals are delivered to the GUI thread in
order, and the window rebuilds itself from a fresh view after each one.
"""
from __future__ import annotations

import logging
import sys
from typing import Callable, List, Optional

from PyQt6.QtCore import Qt, QThread, pyqtSignal
from PyQt6.QtGui import QFont, QPixmap
from PyQt6.QtWidgets import (
    QApplication, QFrame, QHBoxLayout, QLabel, QMainWindow, QMessageBox,
    QProgressBar, QPushButton, QScrollArea, QStatusBar, QVBoxLayout, QWidget,
)

from ..common.exceptions import SelfUpdateCompileFailed, StoreError
from ..common.logging_config import setup_logging
from ..config import StoreConfig
from ..store_view import InstalledRow, MarketplaceRow, StoreService, StoreView
from ..updater.self_update import SelfUpdater

logger = logging.getLogger(__name__)

ACCENT = "#2196f3"
ICON_SIZE = 48


class TaskWorker(QThread):
    """Runs one blocking call off the GUI thread."""
    progress = pyqtSignal(int, str)
    succeeded = pyqtSignal(object)
    failed = pyqtSignal(object)

    def __init__(self, task: Callable[["TaskWorker"], object]):
        super().__init__()
        self.task = task

    def run(self):
        try:
            result = self.task(self)
        except StoreError as e:
            self.failed.emit(e)
        except Exception as e:
            logger.exception("Background task failed")
            self.failed.emit(StoreError(f"Unexpected error: {e}", cause=e))
        else:
            self.succeeded.emit(result)


class InstalledAppRow(QFrame):
    """One installed app with Launch and, when offered, Update buttons."""

    def __init__(self, row: InstalledRow, on_launch, on_update):
        super().__init__()
        self.setStyleSheet("InstalledAppRow { background-color: white; border-radius: 5px; }")

        layout = QHBoxLayout(self)
        info = QVBoxLayout()

        name_label = QLabel(row.name)
        name_label.setFont(QFont("", 12, QFont.Weight.Bold))
        info.addWidget(name_label)

        version_text = f"Version: {row.record.version}"
        if row.update_available:
            version_text += f"  (new: {row.remote_version})"
        info.addWidget(QLabel(version_text))
        layout.addLayout(info)
        layout.addStretch()

        if row.update_available:
            update_btn = QPushButton("Update")
            update_btn.clicked.connect(lambda: on_update(row.name))
            layout.addWidget(update_btn)

        launch_btn = QPushButton("Launch")
        launch_btn.clicked.connect(lambda: on_launch(row.name))
        layout.addWidget(launch_btn)


class MarketplaceCard(QFrame):
    """One marketplace entry."""

    def __init__(self, row: MarketplaceRow, on_install):
        super().__init__()
        self.row = row
        self.setStyleSheet("MarketplaceCard { background-color: white; border-radius: 5px; }")

        layout = QHBoxLayout(self)

        self.icon_label = QLabel()
        self.icon_label.setFixedSize(ICON_SIZE, ICON_SIZE)
        layout.addWidget(self.icon_label)

        info = QVBoxLayout()

        name_label = QLabel(row.app.name)
        name_label.setFont(QFont("", 12, QFont.Weight.Bold))
        info.addWidget(name_label)
        desc_label = QLabel(row.app.description)
        desc_label.setWordWrap(True)
        info.addWidget(desc_label)
        info.addWidget(QLabel(f"Version: {row.app.version}"))
        info.addWidget(QLabel(f"By: {row.app.author}"))
        layout.addLayout(info)
        layout.addStretch()

        right = QVBoxLayout()
        self.install_btn = QPushButton(row.action)
        self.install_btn.setEnabled(row.action != "Installed")
        self.install_btn.clicked.connect(lambda: on_install(row, self))
        right.addWidget(self.install_btn)

        self.progress = QProgressBar()
        self.progress.setVisible(False)
        right.addWidget(self.progress)
        layout.addLayout(right)

    def set_icon(self, data: bytes):
        pixmap = QPixmap()
        if pixmap.loadFromData(data):
            self.icon_label.setPixmap(pixmap.scaled(
                ICON_SIZE, ICON_SIZE,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            ))

    def set_installing(self, installing: bool):
        self.install_btn.setEnabled(not installing)
        self.progress.setVisible(installing)
        if installing:
            self.install_btn.setText("Installing...")

    def set_progress(self, percent: int, text: str = ""):
        self.progress.setValue(percent)
        if text:
            self.progress.setFormat(text)


class StoreWindow(QMainWindow):
    """Main store window; holds no store state of its own."""

    def __init__(self, service: StoreService, self_updater: SelfUpdater):
        super().__init__()
        self.service = service
        self.self_updater = self_updater
        self._workers: List[TaskWorker] = []

        self.setWindowTitle("DRAGE Java Apps")
        self.resize(800, 600)
        self._build_ui()
        self.refresh()

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)

        header = QWidget()
        header.setStyleSheet(f"background-color: {ACCENT};")
        header_layout = QHBoxLayout(header)
        title = QLabel("DRAGE Java Apps")
        title.setFont(QFont("", 18, QFont.Weight.Bold))
        title.setStyleSheet("color: white;")
        header_layout.addWidget(title)
        header_layout.addStretch()
        self.refresh_btn = QPushButton("Refresh Marketplace")
        self.refresh_btn.clicked.connect(self.refresh)
        header_layout.addWidget(self.refresh_btn)
        main_layout.addWidget(header)

        self.installed_layout = self._section(main_layout, "Installed Apps")
        self.market_layout = self._section(main_layout, "Marketplace")

        self.status = QStatusBar()
        self.setStatusBar(self.status)

    def _section(self, parent_layout: QVBoxLayout, title: str) -> QVBoxLayout:
        label = QLabel(title)
        label.setFont(QFont("", 16, QFont.Weight.Bold))
        parent_layout.addWidget(label)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        container = QWidget()
        layout = QVBoxLayout(container)
        layout.addStretch()
        scroll.setWidget(container)
        parent_layout.addWidget(scroll)
        return layout

    @staticmethod
    def _clear(layout: QVBoxLayout):
        while layout.count() > 1:
            item = layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

    def _start(self, task, on_success, on_failure=None, on_progress=None):
        worker = TaskWorker(task)
        worker.succeeded.connect(on_success)
        worker.failed.connect(on_failure or self._on_action_failed)
        if on_progress:
            worker.progress.connect(on_progress)
        worker.finished.connect(lambda: self._workers.remove(worker))
        self._workers.append(worker)
        worker.start()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def refresh(self):
        self.refresh_btn.setEnabled(False)
        self.status.showMessage("Loading marketplace...")
        self._start(lambda worker: self.service.refresh(), self._render, self._on_refresh_failed)

    def _render(self, view: StoreView):
        self.refresh_btn.setEnabled(True)
        self._clear(self.installed_layout)
        self._clear(self.market_layout)

        for row in view.installed:
            widget = InstalledAppRow(row, self._on_launch, self._on_update)
            self.installed_layout.insertWidget(self.installed_layout.count() - 1, widget)

        if view.installed_error:
            error_label = QLabel(view.installed_error)
            error_label.setStyleSheet("color: red;")
            self.installed_layout.insertWidget(0, error_label)

        if view.error:
            error_label = QLabel(view.error)
            error_label.setStyleSheet("color: red;")
            self.market_layout.insertWidget(0, error_label)
        for row in view.marketplace:
            card = MarketplaceCard(row, self._on_install)
            self.market_layout.insertWidget(self.market_layout.count() - 1, card)
            if row.app.icon:
                self._load_icon(row, card)

        self.status.showMessage(f"{len(view.installed)} installed, {len(view.marketplace)} available")

    def _show_error(self, error: StoreError):
        self.refresh_btn.setEnabled(True)
        logger.error(f"Operation failed: {error}")
        text = error.message
        if isinstance(error, SelfUpdateCompileFailed) and error.output:
            text += f"\n\n{error.output}"
        QMessageBox.critical(self, "Error", text)

    def _on_refresh_failed(self, error: StoreError):
        self._show_error(error)
        self.status.showMessage("Could not load the store")

    def _on_action_failed(self, error: StoreError):
        self._show_error(error)
        self.refresh()

    def _load_icon(self, row: MarketplaceRow, card: MarketplaceCard):
        self._start(
            lambda worker: self.service.fetch_icon(row.app),
            card.set_icon,
            lambda error: logger.debug(f"No icon for {row.app.name}: {error}"),
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _on_install(self, row: MarketplaceRow, card: MarketplaceCard):
        card.set_installing(True)
        if row.is_self:
            self._start(
                lambda worker: self.self_updater.apply(row.app.download_url),
                lambda _source: self.self_updater.restart(),
            )
            return

        def task(worker: TaskWorker):
            return self.service.install(row.app, worker.progress.emit)

        self._start(
            task,
            lambda outcome: self.refresh(),
            on_progress=card.set_progress,
        )

    def _on_update(self, name: str):
        def task(worker: TaskWorker):
            app = self.service.find(name)
            if app is None:
                raise StoreError(f"{name} is no longer in the marketplace")
            return self.service.install(app)

        self.status.showMessage(f"Updating {name}...")
        self._start(task, lambda outcome: self.refresh())

    def _on_launch(self, name: str):
        self._start(
            lambda worker: self.service.launch(name),
            lambda path: self.status.showMessage(f"Launched {name}"),
        )


def main(config: Optional[StoreConfig] = None) -> int:
    """Entry point for the store window."""
    setup_logging(level=logging.INFO)

    app = QApplication(sys.argv)
    app.setApplicationName("DRAGE Java Apps")

    config = config or StoreConfig()
    service = StoreService(config)
    self_updater = SelfUpdater(config, transport=service.transport, exit_func=app.exit)
    service.installer.self_updater = self_updater

    window = StoreWindow(service, self_updater)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
