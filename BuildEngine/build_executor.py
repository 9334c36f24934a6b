"""
Build Executor - Runs the incremental asset pipeline over a catalog.

The executor:
1. Captures a signature for every requested source file (fatal if one is
   inaccessible) and looks it up in the asset cache
2. Sends the work the cache could not satisfy (metadata extraction,
   transcodes, cover renditions) to a thread pool, one task per source file
3. Registers what the workers produced, on the main thread only
4. Zips release archives that are not cached yet from the transcodes and
   covers of step 3, again on the pool
5. Persists the cache index and applies the cache optimization policy

Workers never touch the cache. They write into deterministic paths inside
the cache directory and report back; transcode failures are collected per
artifact and do not stop the build.
"""

import logging
import shutil
import zipfile
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from AudioDecoder import SourceFormat, detect_format
from AudioTags import AudioMeta, extract_audio_meta

from .archives import Archives, archive_filename, archive_key, unique_entry_name
from .asset import Asset, AssetIntent, CacheOptimization
from .asset_cache import AssetCache
from .audio_format import AudioFormat
from .build_settings import Build
from .cover_image import CoverImage, cover_filename
from .image_processor import COVER_EDGE_SIZES, open_rgb, plan_edge_sizes, render_cover
from .source_file_signature import SourceFileSignature
from .stats import BuildStats
from .tag_mapping import TagMapping, mapping_key
from .transcoder import TranscodeError, transcode
from .transcodes import Transcodes, transcode_filename

logger = logging.getLogger(__name__)

ARCHIVE_COVER_NAME = "cover.jpg"


@dataclass
class TrackRequest:
    """An audio source file (relative to the catalog) and the formats it is needed in."""

    source_path: Path
    formats: list[AudioFormat] = field(default_factory=list)
    tag_mapping: Optional[TagMapping] = None  # None = copy the source's tags
    intent: AssetIntent = AssetIntent.DELIVERABLE

    def __post_init__(self):
        self.source_path = Path(self.source_path)


@dataclass
class ImageRequest:
    source_path: Path
    edge_sizes: tuple[int, ...] = COVER_EDGE_SIZES
    intent: AssetIntent = AssetIntent.DELIVERABLE

    def __post_init__(self):
        self.source_path = Path(self.source_path)


@dataclass
class ArchiveRequest:
    """A release offered as one zip per download format: its tracks in order and an optional cover."""

    name: str
    tracks: list[Path] = field(default_factory=list)
    formats: list[AudioFormat] = field(default_factory=list)
    cover_path: Optional[Path] = None
    tag_mappings: Optional[list[Optional[TagMapping]]] = None  # Parallel to tracks

    def __post_init__(self):
        self.tracks = [Path(p) for p in self.tracks]
        if self.cover_path is not None:
            self.cover_path = Path(self.cover_path)


@dataclass
class TrackOutput:
    source_path: Path
    meta: AudioMeta
    files: dict[AudioFormat, Path] = field(default_factory=dict)


@dataclass
class CoverOutput:
    source_path: Path
    files: dict[int, Path] = field(default_factory=dict)  # edge size → file


@dataclass
class ArchiveOutput:
    name: str
    files: dict[AudioFormat, Path] = field(default_factory=dict)


@dataclass
class BuildResult:
    """Result of a build or cache optimization run."""

    success: bool = True
    tracks: list[TrackOutput] = field(default_factory=list)
    covers: list[CoverOutput] = field(default_factory=list)
    archives: list[ArchiveOutput] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)  # (what, details)
    stats: BuildStats = field(default_factory=BuildStats)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def summary(self) -> str:
        status = "Build completed" if not self.errors else "Build completed with errors"
        lines = [self.stats.summary]
        if self.errors:
            lines.append(f"  {len(self.errors)} errors occurred")
        return f"{status}:\n" + "\n".join(lines)


# ── Worker messages ─────────────────────────────────────────────────────────


@dataclass
class _TranscodeJob:
    audio_format: AudioFormat
    tag_mapping: Optional[TagMapping]
    filename: str  # Relative to the cache directory
    intent: AssetIntent = AssetIntent.DELIVERABLE

    @property
    def tag_key(self) -> str:
        return mapping_key(self.tag_mapping)


@dataclass
class _TrackJob:
    signature: SourceFileSignature
    source_path: Path  # Absolute
    need_meta: bool
    transcodes: list[_TranscodeJob] = field(default_factory=list)


@dataclass
class _TrackOutcome:
    job: _TrackJob
    meta: Optional[AudioMeta] = None
    produced: list[_TranscodeJob] = field(default_factory=list)
    failures: list[tuple[_TranscodeJob, TranscodeError]] = field(default_factory=list)


@dataclass
class _ImageJob:
    signature: SourceFileSignature
    source_path: Path
    intent: AssetIntent
    renditions: list[tuple[int, str]] = field(default_factory=list)  # (edge size, filename)


@dataclass
class _ImageOutcome:
    job: _ImageJob
    produced: list[tuple[int, str]] = field(default_factory=list)
    source_edge: int = 0
    error: Optional[str] = None


@dataclass
class _ArchiveJob:
    request: ArchiveRequest
    mappings: list[Optional[TagMapping]]
    cover_signature: Optional[SourceFileSignature]
    track_signatures: list[SourceFileSignature]
    missing: list[AudioFormat] = field(default_factory=list)  # Formats to zip this build

    @property
    def tag_keys(self) -> list[str]:
        return [mapping_key(m) for m in self.mappings]

    @property
    def key(self) -> str:
        return archive_key(self.cover_signature, self.track_signatures, self.tag_keys)


@dataclass
class _ZipJob:
    archive: _ArchiveJob
    audio_format: AudioFormat
    filename: str  # Relative to the cache directory
    entries: list[tuple[str, Path]] = field(default_factory=list)  # (name in zip, file)


@dataclass
class _ZipOutcome:
    job: _ZipJob
    error: Optional[str] = None


class BuildExecutor:
    """
    Usage:
        build = Build.from_settings(BuildSettings.load("catalog.json"))
        executor = BuildExecutor(build)
        result = executor.run(
            scanner.track_requests(formats),
            scanner.image_requests(),
            scanner.archive_requests(download_formats),
        )
        print(result.summary)
    """

    def __init__(self, build: Build, stats: Optional[BuildStats] = None, publish_dir: Optional[Path] = None):
        self.build = build
        self.stats = stats if stats is not None else BuildStats()
        # Deliverables are copied here after the build (required to keep them under the wipe policy)
        self.publish_dir = Path(publish_dir) if publish_dir is not None else None

    # ── Public API ──────────────────────────────────────────────────────────

    def run(
        self,
        tracks: list[TrackRequest],
        images: Optional[list[ImageRequest]] = None,
        archives: Optional[list[ArchiveRequest]] = None,
    ) -> BuildResult:
        """
        Build every requested artifact, reusing the cache where possible.

        Raises:
            OSError: A requested source file is missing or inaccessible
            ValueError: An archive request has a tag mapping count that does not match its tracks
        """
        images = images or []
        archives = archives or []
        build = self.build
        result = BuildResult(stats=self.stats)

        if build.wipe_cache:
            shutil.rmtree(build.cache_dir, ignore_errors=True)
            logger.info(f"Wiped cache at {build.cache_dir} before building")

        cache = AssetCache.retrieve(build.cache_dir)
        cache.mark_all_stale(build.build_begin)

        archive_jobs, archive_tracks, archive_images = self._plan_archives(cache, archives)
        track_jobs, track_records = self._plan_tracks(cache, tracks, archive_tracks)
        image_jobs, image_records = self._plan_images(cache, images, archive_images)

        work = len(track_jobs) + len(image_jobs)
        if work:
            logger.info(f"Processing {work} source files with {build.max_workers} workers")

        with ThreadPoolExecutor(max_workers=build.max_workers) as pool:
            futures: list[Future] = [pool.submit(self._process_track, job) for job in track_jobs]
            futures += [pool.submit(self._process_image, job) for job in image_jobs]

            for future in as_completed(futures):
                outcome = future.result()
                if isinstance(outcome, _TrackOutcome):
                    self._register_track(cache, track_records, outcome, result)
                else:
                    self._register_image(cache, image_records, outcome, result)

            zip_jobs = [
                zip_job
                for job in archive_jobs
                for zip_job in self._plan_zips(job, track_records, image_records, result)
            ]
            if zip_jobs:
                logger.info(f"Zipping {len(zip_jobs)} release archives")

            for future in as_completed([pool.submit(self._process_zip, job) for job in zip_jobs]):
                self._register_zip(cache, future.result(), result)

        result.tracks = [self._track_output(track_records, request) for request in tracks]
        result.covers = [self._cover_output(image_records, request) for request in images]
        result.archives = [self._archive_output(cache, job) for job in archive_jobs]

        cache.save()

        if self.publish_dir is not None:
            self._publish(result)

        self._apply_policy(cache, result)
        result.success = not result.errors

        logger.info(result.summary)
        return result

    def optimize_only(self) -> BuildResult:
        """Reclaim every stale asset in the cache without building anything."""
        result = BuildResult(stats=self.stats)
        cache = AssetCache.retrieve(self.build.cache_dir)

        sweep = replace(self.build, cache_optimization=CacheOptimization.IMMEDIATE)
        removed, freed = cache.optimize(sweep)
        self.stats.reclaimed_assets += removed
        self.stats.reclaimed_bytes += freed

        logger.info(result.summary)
        return result

    def analyze_only(self) -> BuildResult:
        """Report the stale assets in the cache without building or reclaiming anything."""
        result = BuildResult(stats=self.stats)
        cache = AssetCache.retrieve(self.build.cache_dir)

        count, size = cache.report_stale()
        self.stats.stale_assets = count
        self.stats.stale_bytes = size

        logger.info(result.summary)
        return result

    # ── Planning (main thread) ──────────────────────────────────────────────

    def _capture(self, relative_path: Path) -> SourceFileSignature:
        return SourceFileSignature.capture(self.build.catalog_dir, relative_path)

    def _plan_archives(
        self, cache: AssetCache, requests: list[ArchiveRequest]
    ) -> tuple[list[_ArchiveJob], list[TrackRequest], list[ImageRequest]]:
        """
        Look up the archives of every release.

        Returns one job per request plus the track and cover requests needed
        to zip the formats that are not cached. Their transcodes are only
        intermediate: once zipped, the cache may reclaim them.
        """
        jobs: list[_ArchiveJob] = []
        track_requests: list[TrackRequest] = []
        image_requests: list[ImageRequest] = []
        zipping: dict[str, set[AudioFormat]] = {}  # release key → formats already planned

        for request in requests:
            mappings = request.tag_mappings if request.tag_mappings is not None else [None] * len(request.tracks)
            if len(mappings) != len(request.tracks):
                raise ValueError(
                    f"Archive '{request.name}' has {len(request.tracks)} tracks but {len(mappings)} tag mappings"
                )

            job = _ArchiveJob(
                request=request,
                mappings=list(mappings),
                cover_signature=self._capture(request.cover_path) if request.cover_path is not None else None,
                track_signatures=[self._capture(path) for path in request.tracks],
            )
            jobs.append(job)

            record = cache.get_archives(job.key)
            planned = zipping.setdefault(job.key, set())
            for audio_format in request.formats:
                asset = record.get(audio_format) if record is not None else None
                if asset is not None:
                    asset.unmark_stale()
                elif audio_format not in planned:
                    planned.add(audio_format)
                    job.missing.append(audio_format)

            if not job.missing:
                self.stats.cache_hits += 1
                logger.debug(f"Cache hit: archives for {request.name}")
                continue

            self.stats.cache_misses += 1
            track_requests += [
                TrackRequest(path, list(job.missing), mapping, AssetIntent.INTERMEDIATE)
                for path, mapping in zip(request.tracks, job.mappings)
            ]
            if request.cover_path is not None:
                image_requests.append(ImageRequest(request.cover_path))

        return jobs, track_requests, image_requests

    def _plan_tracks(
        self, cache: AssetCache, requests: list[TrackRequest], derived: list[TrackRequest] = ()
    ) -> tuple[list[_TrackJob], dict[Path, tuple[SourceFileSignature, Optional[Transcodes]]]]:
        """Plan the requested tracks, then the ones archives need (not counted in the stats)."""
        jobs: dict[SourceFileSignature, _TrackJob] = {}
        records: dict[Path, tuple[SourceFileSignature, Optional[Transcodes]]] = {}

        for index, request in enumerate([*requests, *derived]):
            counted = index < len(requests)
            signature = self._capture(request.source_path)
            record = cache.get_transcodes(signature)
            records[request.source_path] = (signature, record)
            if counted:
                self.stats.tracks += 1

            job = jobs.get(signature)
            if job is None:
                job = _TrackJob(
                    signature=signature,
                    source_path=self.build.catalog_dir / request.source_path,
                    need_meta=record is None,
                )

            tag_key = mapping_key(request.tag_mapping)
            for audio_format in request.formats:
                asset = record.get(audio_format, tag_key) if record is not None else None
                if asset is not None:
                    if request.intent == AssetIntent.DELIVERABLE:
                        asset.unmark_stale()
                    continue

                planned = next(
                    (t for t in job.transcodes if t.audio_format == audio_format and t.tag_key == tag_key), None
                )
                if planned is not None:
                    if request.intent == AssetIntent.DELIVERABLE:
                        planned.intent = AssetIntent.DELIVERABLE
                    continue

                filename = transcode_filename(signature, audio_format, tag_key)
                job.transcodes.append(_TranscodeJob(audio_format, request.tag_mapping, filename, request.intent))

            if job.need_meta or job.transcodes:
                if counted:
                    self.stats.cache_misses += 1
                jobs[signature] = job
            elif counted:
                self.stats.cache_hits += 1
                logger.debug(f"Cache hit: {request.source_path}")

        return list(jobs.values()), records

    def _plan_images(
        self, cache: AssetCache, requests: list[ImageRequest], derived: list[ImageRequest] = ()
    ) -> tuple[list[_ImageJob], dict[Path, tuple[SourceFileSignature, Optional[CoverImage]]]]:
        jobs: dict[SourceFileSignature, _ImageJob] = {}
        records: dict[Path, tuple[SourceFileSignature, Optional[CoverImage]]] = {}

        for index, request in enumerate([*requests, *derived]):
            counted = index < len(requests)
            signature = self._capture(request.source_path)
            record = cache.get_cover_image(signature)
            records[request.source_path] = (signature, record)

            job = jobs.get(signature) or _ImageJob(
                signature=signature,
                source_path=self.build.catalog_dir / request.source_path,
                intent=request.intent,
            )

            # Once the source size is known, sizes that would need upscaling are never planned
            wanted = request.edge_sizes
            if record is not None and record.source_edge:
                wanted = plan_edge_sizes(record.source_edge, request.edge_sizes)

            for edge_size in wanted:
                asset = record.get(edge_size) if record is not None else None
                if asset is not None:
                    if request.intent == AssetIntent.DELIVERABLE:
                        asset.unmark_stale()
                    continue
                if all(edge_size != e for e, _ in job.renditions):
                    job.renditions.append((edge_size, cover_filename(signature, edge_size)))

            if job.renditions:
                if counted:
                    self.stats.cache_misses += 1
                jobs[signature] = job
            elif counted:
                self.stats.cache_hits += 1
                logger.debug(f"Cache hit: {request.source_path}")

        return list(jobs.values()), records

    def _plan_zips(self, job: _ArchiveJob, track_records: dict, image_records: dict, result: BuildResult) -> list[_ZipJob]:
        """Collect the files of each missing archive. A release with a missing input is skipped and reported."""
        request = job.request
        cache_dir = self.build.cache_dir
        if not job.missing:
            return []

        cover_file = None
        if request.cover_path is not None:
            _, cover_record = image_records[request.cover_path]
            if cover_record is None or not cover_record.assets:
                what = f"{request.name} archive"
                logger.error(f"Archive skipped: {what}: cover image unavailable")
                result.errors.append((what, "cover image unavailable"))
                return []
            cover_file = cache_dir / cover_record.assets[max(cover_record.assets)].filename

        zip_jobs = []
        for audio_format in job.missing:
            used: set[str] = set()
            entries: list[tuple[str, Path]] = []
            unavailable: list[str] = []

            for path, tag_key in zip(request.tracks, job.tag_keys):
                _, record = track_records[path]
                asset = record.get(audio_format, tag_key) if record is not None else None
                if asset is None:
                    unavailable.append(path.as_posix())
                    continue
                name = unique_entry_name(f"{path.stem}{audio_format.extension}", used)
                entries.append((name, cache_dir / asset.filename))

            if unavailable:
                what = f"{request.name} → {audio_format}"
                details = f"no transcode for {', '.join(unavailable)}"
                logger.error(f"Archive skipped: {what}: {details}")
                result.errors.append((what, details))
                continue

            if cover_file is not None:
                entries.append((unique_entry_name(ARCHIVE_COVER_NAME, used), cover_file))

            zip_jobs.append(_ZipJob(job, audio_format, archive_filename(job.key, audio_format), entries))

        return zip_jobs

    # ── Workers ─────────────────────────────────────────────────────────────

    def _process_track(self, job: _TrackJob) -> _TrackOutcome:
        """Extract metadata and transcode one source file. Runs in worker thread."""
        outcome = _TrackOutcome(job=job)

        if job.need_meta:
            outcome.meta = extract_audio_meta(job.source_path, ffmpeg_path=self.build.ffmpeg_path)

        if not job.transcodes:
            return outcome

        source_format: Optional[SourceFormat] = detect_format(job.source_path)
        for transcode_job in job.transcodes:
            try:
                transcode(
                    job.source_path,
                    self.build.cache_dir / transcode_job.filename,
                    transcode_job.audio_format,
                    tag_mapping=transcode_job.tag_mapping,
                    source_format=source_format,
                    ffmpeg_path=self.build.ffmpeg_path,
                )
                outcome.produced.append(transcode_job)
            except TranscodeError as e:
                outcome.failures.append((transcode_job, e))

        return outcome

    def _process_image(self, job: _ImageJob) -> _ImageOutcome:
        """Render cover renditions for one image. Runs in worker thread."""
        outcome = _ImageOutcome(job=job)
        try:
            img = open_rgb(job.source_path)
        except OSError as e:
            outcome.error = f"Could not open image: {e}"
            return outcome

        outcome.source_edge = min(img.size)
        planned = set(plan_edge_sizes(outcome.source_edge, [edge for edge, _ in job.renditions]))
        for edge_size, filename in job.renditions:
            if edge_size not in planned:
                continue
            try:
                render_cover(img, edge_size, self.build.cache_dir / filename)
                outcome.produced.append((edge_size, filename))
            except OSError as e:
                outcome.error = f"Could not write {edge_size}px rendition: {e}"

        return outcome

    def _process_zip(self, job: _ZipJob) -> _ZipOutcome:
        """Write one release archive. Runs in worker thread."""
        outcome = _ZipOutcome(job=job)
        target = self.build.cache_dir / job.filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for name, path in job.entries:
                    zf.write(path, arcname=name)
        except OSError as e:
            target.unlink(missing_ok=True)
            outcome.error = f"Could not write archive: {e}"
        return outcome

    # ── Registration (main thread) ──────────────────────────────────────────

    def _register_track(self, cache: AssetCache, records: dict, outcome: _TrackOutcome, result: BuildResult) -> None:
        job = outcome.job
        record = cache.get_transcodes(job.signature)
        if record is None:
            record = Transcodes(job.signature, outcome.meta or AudioMeta())
            cache.register_transcodes(record)
            self.stats.metadata_extracted += 1

        for path, (signature, _) in records.items():
            if signature == job.signature:
                records[path] = (signature, record)

        for transcode_job in outcome.produced:
            asset = Asset.create(self.build, transcode_job.filename, transcode_job.intent)
            record.set(transcode_job.audio_format, transcode_job.tag_key, asset)
            self.stats.add_transcode(asset.filesize_bytes)

        for transcode_job, error in outcome.failures:
            what = f"{job.signature.path} → {transcode_job.audio_format}"
            logger.error(f"Transcode failed: {what}: {error}")
            result.errors.append((what, error.details()))

    def _register_image(self, cache: AssetCache, records: dict, outcome: _ImageOutcome, result: BuildResult) -> None:
        job = outcome.job
        record = cache.get_cover_image(job.signature)
        if record is None:
            record = CoverImage(job.signature)
            cache.register_cover_image(record)
        if outcome.source_edge:
            record.source_edge = outcome.source_edge

        for path, (signature, _) in records.items():
            if signature == job.signature:
                records[path] = (signature, record)

        for edge_size, filename in outcome.produced:
            asset = Asset.create(self.build, filename, job.intent)
            record.set(edge_size, asset)
            self.stats.add_image(asset.filesize_bytes)

        if outcome.error:
            logger.error(f"Cover image failed: {job.signature.path}: {outcome.error}")
            result.errors.append((job.signature.path, outcome.error))

    def _register_zip(self, cache: AssetCache, outcome: _ZipOutcome, result: BuildResult) -> None:
        job = outcome.job
        archive = job.archive
        if outcome.error:
            what = f"{archive.request.name} → {job.audio_format}"
            logger.error(f"Archive failed: {what}: {outcome.error}")
            result.errors.append((what, outcome.error))
            return

        record = cache.get_archives(archive.key)
        if record is None:
            record = Archives(archive.cover_signature, archive.track_signatures, archive.tag_keys)
            cache.register_archives(record)

        asset = Asset.create(self.build, job.filename, AssetIntent.DELIVERABLE)
        record.set(job.audio_format, asset)
        self.stats.add_archive(asset.filesize_bytes)

    # ── Outputs ─────────────────────────────────────────────────────────────

    def _track_output(self, records: dict, request: TrackRequest) -> TrackOutput:
        _, record = records[request.source_path]
        if record is None:
            return TrackOutput(source_path=request.source_path, meta=AudioMeta())

        tag_key = mapping_key(request.tag_mapping)
        files = {}
        for audio_format in request.formats:
            asset = record.get(audio_format, tag_key)
            if asset is not None:
                files[audio_format] = self.build.cache_dir / asset.filename

        return TrackOutput(source_path=request.source_path, meta=record.source_meta, files=files)

    def _cover_output(self, records: dict, request: ImageRequest) -> CoverOutput:
        _, record = records[request.source_path]
        files = {}
        if record is not None:
            for edge_size in request.edge_sizes:
                asset = record.get(edge_size)
                if asset is not None:
                    files[edge_size] = self.build.cache_dir / asset.filename
        return CoverOutput(source_path=request.source_path, files=files)

    def _archive_output(self, cache: AssetCache, job: _ArchiveJob) -> ArchiveOutput:
        record = cache.get_archives(job.key)
        files = {}
        if record is not None:
            for audio_format in job.request.formats:
                asset = record.get(audio_format)
                if asset is not None:
                    files[audio_format] = self.build.cache_dir / asset.filename
        return ArchiveOutput(name=job.request.name, files=files)

    def _publish_file(self, cached_path: Path, name: str) -> Path:
        """
        Copy a cached file to <publish_dir>/<cache subdirectory>/<cache file stem>/<name>.

        The cache file stem is unique per artifact, so two sources that share
        a name never publish to the same path.
        """
        relative = cached_path.relative_to(self.build.cache_dir)
        dest = self.publish_dir / relative.parent / relative.stem / name
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(cached_path, dest)
        return dest

    def _publish(self, result: BuildResult) -> None:
        """Copy deliverables out of the cache and point the outputs at the copies."""
        for track in result.tracks:
            for audio_format, cached_path in list(track.files.items()):
                name = f"{track.source_path.stem}{audio_format.extension}"
                track.files[audio_format] = self._publish_file(cached_path, name)

        for cover in result.covers:
            for edge_size, cached_path in list(cover.files.items()):
                cover.files[edge_size] = self._publish_file(cached_path, ARCHIVE_COVER_NAME)

        for archive in result.archives:
            for audio_format, cached_path in list(archive.files.items()):
                archive.files[audio_format] = self._publish_file(cached_path, f"{archive.name}.zip")

    def _apply_policy(self, cache: AssetCache, result: BuildResult) -> None:
        match self.build.cache_optimization:
            case CacheOptimization.DEFAULT | CacheOptimization.DELAYED | CacheOptimization.IMMEDIATE:
                removed, freed = cache.optimize(self.build)
                self.stats.reclaimed_assets += removed
                self.stats.reclaimed_bytes += freed
            case CacheOptimization.MANUAL:
                count, size = cache.report_stale()
                self.stats.stale_assets = count
                self.stats.stale_bytes = size
            case CacheOptimization.WIPE:
                if self.publish_dir is None:
                    logger.warning("Wiping the cache without a publish directory; output paths will not exist")
                cache.wipe()
